"""Git repository contents backend (GitHub contents API)

Directories are listed one level at a time with
`GET <api>/repos/<owner>/<repo>/contents/<path>?ref=<ref>`. The API answers
with an array for a directory and a single object for a file:

    [{"name": "docs", "type": "dir", "size": 0, "download_url": null}, ...]
    {"name": "README.md", "type": "file", "size": 42, "download_url": "https://raw..."}

Source config:
    owner (str):  repository owner (required)
    repo (str):   repository name (required)
    ref (str):    branch, tag or commit (optional, default branch when absent)
"""

import logging
import urllib.parse

from linkproxy.backends.base import SourceBackend, github_headers, handle_http_error, raise_for_upstream_status
from linkproxy.exceptions import NotFoundError
from linkproxy.models import FileItem, LinkRecordModel, SourceType
from linkproxy.types import SourceConfig
from linkproxy.utils import paths


logger = logging.getLogger(__name__)

DIRECTORY_TYPE = 'dir'
FILE_TYPE = 'file'


class RepoContentsBackend(SourceBackend):
    """Backend for files and folders inside a Git repository

    Listings place every directory before every file, then order entries by
    name case-insensitively.

    Example:
        >>> backend = RepoContentsBackend(EngineConfig(), httpx.Client())
        >>> [item.name for item in backend.list_files('/', {'owner': 'octo', 'repo': 'hello'})]
        ['docs', 'src', 'LICENSE', 'readme.md']
    """

    source_tag = SourceType.REPO_CONTENTS.value

    @handle_http_error
    def list_files(self, path: str, config: SourceConfig) -> list[FileItem]:
        """List the immediate children of a repository directory

        Raises:
            NotFoundError: If the path does not exist or points at a file.
            BackendUnavailableError: On any other upstream failure.
            InvalidConfigurationError: If owner or repo is missing.
        """
        entries = self._contents(path, config)
        if not isinstance(entries, list):
            raise NotFoundError(f"'{paths.normalize(path)}' is not a directory.")

        items = [
            FileItem(
                name=entry['name'],
                size=int(entry.get('size') or 0),
                is_directory=entry.get('type') == DIRECTORY_TYPE,
                download_locator=entry.get('download_url'),
                source_tag=self.source_tag,
            )
            for entry in entries
        ]
        return sorted(items, key=lambda item: (not item.is_directory, item.name.lower()))

    @handle_http_error
    def resolve_download(self, sub_path: str, record: LinkRecordModel) -> str:
        """Return the raw-content URL of a repository file

        With a pinned ref the URL is composed directly. Without one the file
        metadata is fetched first, because only the API knows the raw URL of
        the default branch.

        Raises:
            NotFoundError: If the path does not exist or is not a file.
            BackendUnavailableError: On any other upstream failure.
            InvalidConfigurationError: If owner or repo is missing.
        """
        config = record.source_config
        owner, repo = self._require(config, 'owner', 'repo')
        path = paths.join(record.target, sub_path)
        if path == paths.SEPARATOR:
            raise NotFoundError('Repository root is not a file.')

        ref = str(config.get('ref') or '').strip()
        if ref:
            return f"{self.config.github_raw_url.rstrip('/')}/{owner}/{repo}/{ref}/{urllib.parse.quote(path.lstrip('/'))}"

        entry = self._contents(path, config)
        if not isinstance(entry, dict) or entry.get('type') != FILE_TYPE or not entry.get('download_url'):
            raise NotFoundError(f"'{path}' is not a file.")
        return entry['download_url']

    def _contents(self, path: str, config: SourceConfig) -> list | dict:
        owner, repo = self._require(config, 'owner', 'repo')
        relative = paths.normalize(path).lstrip(paths.SEPARATOR)
        url = f"{self.config.github_api_url.rstrip('/')}/repos/{owner}/{repo}/contents/{urllib.parse.quote(relative)}"

        params = {}
        if config.get('ref'):
            params['ref'] = str(config['ref']).strip()

        logger.debug('Fetching repository contents.', extra={'owner': owner, 'repo': repo, 'path': relative})
        response = self.client.get(url, params=params, headers=github_headers(self.config))
        raise_for_upstream_status(response, f"'{owner}/{repo}/{relative}'")
        return response.json()
