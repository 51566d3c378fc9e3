"""Git release assets backend (GitHub releases API)

Releases are exposed as a synthetic two-level hierarchy:

    /                       one directory per release (named by its tag)
    /<tag>/                 the release's assets
    /<tag>/<asset>          downloadable file

Listing modes (source config):
    {"tag": "v1.2.0"}       pin a single release  -> GET /repos/<o>/<r>/releases/tags/<tag>
    {"latest": true}        latest release only   -> GET /repos/<o>/<r>/releases/latest
    {"count": 5}            recent releases       -> GET /repos/<o>/<r>/releases?per_page=5

With `flattenReleaseFolder: true` and exactly one release in scope (pinned tag,
latest, or count == 1) the tag level is skipped and the assets sit directly
at the root. A flattened count == 1 link follows the latest release, like
`latest`. With more than one release in scope the flag has no effect.

Downloads never hit the API; asset URLs are composed from owner, repo, tag and
asset name. A pinned link only reaches its own tag:

    <download>/<o>/<r>/releases/download/<tag>/<asset>
    <download>/<o>/<r>/releases/latest/download/<asset>
"""

import logging
import urllib.parse
from typing import Any

from linkproxy.backends.base import SourceBackend, github_headers, handle_http_error, raise_for_upstream_status
from linkproxy.exceptions import InvalidConfigurationError, NotFoundError
from linkproxy.models import FileItem, LinkRecordModel, SourceType
from linkproxy.types import SourceConfig
from linkproxy.utils import paths
from linkproxy.utils.constants import DEFAULT_RELEASE_COUNT
from linkproxy.utils.helpers import parse_timestamp


logger = logging.getLogger(__name__)

LATEST = 'latest'


def releases_in_scope(config: SourceConfig) -> int:
    """Number of releases a source config can expose (1 for pinned tag / latest)."""
    if config.get('tag') or config.get('latest'):
        return 1
    return release_count(config)


def release_count(config: SourceConfig) -> int:
    try:
        count = int(config.get('count') or DEFAULT_RELEASE_COUNT)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Release count must be an integer (given value: {config.get('count')!r}).") from e
    if count < 1:
        raise InvalidConfigurationError(f'Release count must be positive (given value: {count}).')
    return count


def flatten_requested(config: SourceConfig) -> bool:
    return bool(config.get('flattenReleaseFolder'))


def is_flattened(config: SourceConfig) -> bool:
    """True when the release directory level is skipped (flag set and a single release in scope)."""
    return flatten_requested(config) and releases_in_scope(config) == 1


class ReleaseAssetsBackend(SourceBackend):
    """Backend for assets attached to a repository's releases

    Example:
        >>> backend = ReleaseAssetsBackend(EngineConfig(), httpx.Client())
        >>> [item.name for item in backend.list_files('/', {'owner': 'octo', 'repo': 'hello', 'count': 2})]
        ['v1.1.0', 'v1.0.0']
        >>> [item.name for item in backend.list_files('/v1.1.0', {'owner': 'octo', 'repo': 'hello', 'count': 2})]
        ['hello-linux.tar.gz', 'hello-windows.zip']
    """

    source_tag = SourceType.RELEASE_ASSETS.value

    @handle_http_error
    def list_files(self, path: str, config: SourceConfig) -> list[FileItem]:
        """List releases (as directories) or the assets of one release

        Raises:
            NotFoundError: If the path is deeper than the release hierarchy or names an unknown release.
            BackendUnavailableError: On upstream failures.
            InvalidConfigurationError: If owner or repo is missing.
        """
        segments = paths.split(path)
        releases = self._releases(config)

        if flatten_requested(config) and not is_flattened(config):
            logger.warning(
                'Ignoring flattenReleaseFolder: more than one release in scope.',
                extra={'owner': config.get('owner'), 'repo': config.get('repo')},
            )

        if is_flattened(config):
            if segments:
                raise NotFoundError(f"'{paths.normalize(path)}' is not a directory.")
            return self._assets(releases[0])

        if not segments:
            return [self._release_directory(release) for release in releases]

        if len(segments) > 1:
            raise NotFoundError(f"'{paths.normalize(path)}' is not a directory.")

        for release in releases:
            if release.get('tag_name') == segments[0]:
                return self._assets(release)
        raise NotFoundError(f"Release '{segments[0]}' not found.")

    def resolve_download(self, sub_path: str, record: LinkRecordModel) -> str:
        """Compose the download URL of a release asset

        The tag segment is the pinned tag when configured, else the release
        directory named in the path. Links following the latest release
        (`latest`, or a flattened listing without a pinned tag) use the
        literal 'latest' URL, so listing and download see the same release.

        Raises:
            NotFoundError: If the path does not name an asset of a release in scope.
            InvalidConfigurationError: If owner or repo is missing.
        """
        config = record.source_config
        owner, repo = self._require(config, 'owner', 'repo')
        segments = paths.split(paths.join(record.target, sub_path))
        pinned = str(config['tag']) if config.get('tag') else None

        if is_flattened(config):
            if len(segments) != 1:
                raise NotFoundError(f"'{paths.normalize(sub_path)}' is not a release asset.")
            tag, asset = pinned, segments[0]
        else:
            if len(segments) != 2:
                raise NotFoundError(f"'{paths.normalize(sub_path)}' is not a release asset.")
            tag, asset = segments
            if pinned and tag != pinned:
                raise NotFoundError(f"Release '{tag}' not found.")
            if not pinned and config.get('latest'):
                tag = None

        base = f"{self.config.github_download_url.rstrip('/')}/{owner}/{repo}/releases"
        quoted_asset = urllib.parse.quote(asset)
        if tag:
            return f'{base}/download/{urllib.parse.quote(tag)}/{quoted_asset}'
        return f'{base}/{LATEST}/download/{quoted_asset}'

    def _releases(self, config: SourceConfig) -> list[dict[str, Any]]:
        owner, repo = self._require(config, 'owner', 'repo')
        api = f"{self.config.github_api_url.rstrip('/')}/repos/{owner}/{repo}/releases"

        # NOTE: A flattened count == 1 link downloads through /releases/latest,
        #       so it lists the same release rather than the newest one (which
        #       may be a prerelease).
        if config.get('tag'):
            url, params, what = f"{api}/tags/{urllib.parse.quote(str(config['tag']))}", {}, f"Release '{config['tag']}'"
        elif config.get('latest') or is_flattened(config):
            url, params, what = f'{api}/{LATEST}', {}, f"Latest release of '{owner}/{repo}'"
        else:
            url, params, what = api, {'per_page': release_count(config)}, f"Releases of '{owner}/{repo}'"

        logger.debug('Fetching releases.', extra={'owner': owner, 'repo': repo, 'url': url})
        response = self.client.get(url, params=params, headers=github_headers(self.config))
        raise_for_upstream_status(response, what)

        body = response.json()
        return body if isinstance(body, list) else [body]

    def _release_directory(self, release: dict[str, Any]) -> FileItem:
        return FileItem(
            name=release['tag_name'],
            size=sum(int(asset.get('size') or 0) for asset in release.get('assets') or []),
            is_directory=True,
            modified_at=parse_timestamp(release.get('published_at')),
            source_tag=self.source_tag,
        )

    def _assets(self, release: dict[str, Any]) -> list[FileItem]:
        # fmt: off
        return [
            FileItem(
                name=asset['name'],
                size=int(asset.get('size') or 0),
                modified_at=parse_timestamp(asset.get('updated_at')),
                download_locator=asset.get('browser_download_url'),
                source_tag=self.source_tag,
            )
            for asset in release.get('assets') or []
        ]
        # fmt: on
