"""Common contract of the source backends

A source backend turns the canonical "list a folder / locate a file" operations
into calls against one upstream API. Backends are stateless between requests:
everything request-specific arrives through arguments, everything
process-wide (base URLs, tokens, timeouts) through the EngineConfig and the
shared httpx client injected at construction.

Classes:
    SourceBackend:
        Abstract base class of all backends.

Functions:
    handle_http_error(method) -> Callable
        Decorator: turn transport failures (DNS, TLS, timeouts...) into BackendUnavailableError.
    raise_for_upstream_status(response, what) -> None
        Map a non-2xx upstream response to NotFoundError / BackendUnavailableError.
    github_headers(config) -> dict[str, str]
        Accept and authorization headers for the GitHub REST API.
"""

import functools
import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Any
from collections.abc import Callable

import httpx

from linkproxy.exceptions import BackendUnavailableError, InvalidConfigurationError, NotFoundError
from linkproxy.models import FileItem, LinkRecordModel
from linkproxy.types import SourceConfig
from linkproxy.utils.config import EngineConfig


logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def handle_http_error[F](method: F) -> F:
    """Wrap backend methods performing upstream calls

    Args:
        method (Callable[..., Any]):
            Backend method issuing httpx requests.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises BackendUnavailableError when the
            upstream cannot be reached or does not answer in time.

    Example:
        >>> @handle_http_error
        ... def list_files(self, path, config):
        ...     return self.client.get(...)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except httpx.HTTPError as e:
            logger.warning('Upstream request failed.', extra={'backend': self.source_tag, 'error': str(e)})
            raise BackendUnavailableError(f'{self.source_tag} backend is unreachable: {e}') from e

    return wrapper


def raise_for_upstream_status(response: httpx.Response, what: str) -> None:
    """Raise the matching application error for a non-success upstream response

    Args:
        response (httpx.Response):
            Upstream response.
        what (str):
            Human readable description of the requested resource, used in messages.

    Raises:
        NotFoundError: If the upstream answered 404.
        BackendUnavailableError: For any other non-2xx status.
    """
    if response.is_success:
        return
    if response.status_code == 404:
        raise NotFoundError(f'{what} not found.')
    raise BackendUnavailableError(f'Upstream responded with status {response.status_code} for {what}.')


class SourceBackend(ABC):
    """Abstract source backend

    Attributes:
        config (EngineConfig):
            Process-wide backend settings.
        client (httpx.Client):
            HTTP client shared by every backend of a registry.

    Methods:
        list_files(path: str, config: SourceConfig) -> list[FileItem]:
            Return the immediate children of `path` (fully materialized, not paginated).
            Raises NotFoundError / BackendUnavailableError.

        resolve_download(sub_path: str, record: LinkRecordModel) -> str:
            Return a locator (URL) from which the file at `sub_path` below the
            record's root can be fetched. Raises NotFoundError / BackendUnavailableError.
    """

    source_tag: str = ''

    def __init__(self, config: EngineConfig, client: httpx.Client):
        self.config = config
        self.client = client

    @abstractmethod
    def list_files(self, path: str, config: SourceConfig) -> list[FileItem]:
        pass

    @abstractmethod
    def resolve_download(self, sub_path: str, record: LinkRecordModel) -> str:
        pass

    def _require(self, config: SourceConfig, *names: str) -> tuple[str, ...]:
        """Return required source config values, raising InvalidConfigurationError if any is blank."""
        missing = [name for name in names if not str(config.get(name) or '').strip()]
        if missing:
            missing_list = ', '.join(f"'{name}'" for name in missing)
            raise InvalidConfigurationError(f'{self.source_tag} source is missing required parameters: {missing_list}')
        return tuple(str(config[name]).strip() for name in names)


def github_headers(config: EngineConfig) -> dict[str, str]:
    """Request headers for the GitHub REST API (authenticated when a token is configured)."""
    headers = {'Accept': 'application/vnd.github+json'}
    if config.github_token:
        headers['Authorization'] = f'Bearer {config.github_token}'
    return headers
