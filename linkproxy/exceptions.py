"""Application-level exceptions raised while resolving short links.

Every exception carries an HTTP `status_code` and a machine-readable `error_code`
so the Lambda layer can map it to a response without inspecting its type.

Classes:
    LinkProxyError:
        Base exception for all application-specific errors.
    NotFoundError:
        Unknown short code, unknown sub-path or unknown release asset.
    GoneError:
        Link expired or its visit quota is exhausted.
    AccessDeniedError:
        Missing or wrong access code (surfaced as a gate page, never as an error response).
    BackendUnavailableError:
        Upstream backend answered with a non-success status or could not be reached.
    UnsupportedSourceTypeError:
        No backend is registered for the record's source type.
    CodeGenerationExhaustedError:
        Short code generation hit its retry ceiling.
    InvalidConfigurationError:
        Required backend parameters are missing or inconsistent.
    InvalidRequestError:
        Administrative input is malformed (blank target, visit quota out of range...).
"""


class LinkProxyError(Exception):
    """Base exception for all application-specific errors."""

    status_code = 500
    error_code = 'LINKPROXY_ERROR'


class NotFoundError(LinkProxyError):
    """Raised when a short code, sub-path or asset does not exist."""

    status_code = 404
    error_code = 'NOT_FOUND'


class GoneError(LinkProxyError):
    """Raised when a link is expired or its visit quota is exhausted."""

    status_code = 410
    error_code = 'GONE'


class AccessDeniedError(LinkProxyError):
    """Raised when an access code is missing or does not match."""

    status_code = 200
    error_code = 'ACCESS_CODE_REQUIRED'


class BackendUnavailableError(LinkProxyError):
    """Raised when an upstream backend fails or is unreachable."""

    error_code = 'BACKEND_UNAVAILABLE'


class UnsupportedSourceTypeError(LinkProxyError):
    """Raised when no backend is registered for a source type."""

    error_code = 'UNSUPPORTED_SOURCE_TYPE'


class CodeGenerationExhaustedError(LinkProxyError):
    """Raised when no unique short code could be minted."""

    error_code = 'CODE_GENERATION_EXHAUSTED'


class InvalidConfigurationError(LinkProxyError):
    """Raised when backend parameters are missing or inconsistent."""

    error_code = 'INVALID_CONFIGURATION'


class InvalidRequestError(LinkProxyError):
    """Raised when administrative input is malformed."""

    status_code = 400
    error_code = 'INVALID_REQUEST'
