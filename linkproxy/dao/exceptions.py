"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkRecordNotFoundError:
        Raised when no link record is stored under a short code.

    DataStoreError:
        Raised when the key-value store is unreachable or misbehaves
        (connection issues, timeouts, OOM, etc.).

Example:
    >>> from linkproxy.dao.exceptions import LinkRecordNotFoundError
    >>> raise LinkRecordNotFoundError("Link record with code 'k3x9qa' not found.")
    Traceback (most recent call last):
        ...
    linkproxy.dao.exceptions.LinkRecordNotFoundError: Link record with code 'k3x9qa' not found.
"""

from linkproxy.exceptions import LinkProxyError, NotFoundError


class DAOError(LinkProxyError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'DAO_ERROR'


class LinkRecordNotFoundError(DAOError, NotFoundError):
    """Exception raised when a link record is not found in the data store."""

    status_code = 404
    error_code = 'LINK_NOT_FOUND'


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    error_code = 'DATA_STORE_ERROR'
