"""Source type -> backend lookup

The registry is wired once per Lambda container: every backend shares the
same EngineConfig and httpx client, and nothing is registered at runtime.

Example:
    >>> registry = BackendRegistry(EngineConfig.from_dict(app_config))
    >>> registry.resolve('alist')
    <linkproxy.backends.alist.AListBackend object at ...>
    >>> registry.resolve('ftp')
    Traceback (most recent call last):
        ...
    linkproxy.exceptions.UnsupportedSourceTypeError: Unsupported source type: 'ftp'
"""

from typing import Optional

import httpx

from linkproxy.backends.alist import AListBackend
from linkproxy.backends.base import SourceBackend
from linkproxy.backends.direct import DirectBackend
from linkproxy.backends.release_assets import ReleaseAssetsBackend
from linkproxy.backends.repo_contents import RepoContentsBackend
from linkproxy.exceptions import UnsupportedSourceTypeError
from linkproxy.models import SourceType
from linkproxy.utils.config import EngineConfig


BACKENDS: dict[SourceType, type[SourceBackend]] = {
    SourceType.NONE: DirectBackend,
    SourceType.ALIST: AListBackend,
    SourceType.REPO_CONTENTS: RepoContentsBackend,
    SourceType.RELEASE_ASSETS: ReleaseAssetsBackend,
}


class BackendRegistry:
    """Map source type tags to backend instances

    Args:
        config (EngineConfig):
            Process-wide backend settings injected into every backend.
        http_client (Optional[httpx.Client]):
            Client shared by the backends. A client with the configured
            timeout is created when omitted.
    """

    def __init__(self, config: EngineConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=config.http_timeout, follow_redirects=True)
        self._backends = {source_type: backend(config, self.client) for source_type, backend in BACKENDS.items()}

    def resolve(self, source_type: SourceType | str | None) -> SourceBackend:
        """Return the backend serving a source type (None is the direct URL backend)

        Raises:
            UnsupportedSourceTypeError: If no backend handles the tag.
        """
        try:
            key = SourceType(source_type) if source_type is not None else SourceType.NONE
        except ValueError as e:
            raise UnsupportedSourceTypeError(f'Unsupported source type: {source_type!r}') from e
        return self._backends[key]

    def close(self) -> None:
        """Close the HTTP client if the registry created it."""
        if self._owns_client:
            self.client.close()
