"""AList file manager backend

Folders are listed with a single POST to `<alist>/api/fs/list`; files are
downloaded from AList's direct-link endpoint `<alist>/d/<path>`.

AList answers HTTP 200 even on failures and reports the real outcome in the
body's "code" field, e.g.:

    {"code": 200, "message": "success", "data": {"content": [...], "total": 3}}
    {"code": 500, "message": "object not found", "data": null}

NOTE:
    Listings request every entry at once (`per_page: 0`) and never paginate.
    If the AList server caps its page size, the listing is silently truncated
    to whatever the first page holds.
"""

import logging
import urllib.parse

from linkproxy.backends.base import SourceBackend, handle_http_error, raise_for_upstream_status
from linkproxy.exceptions import BackendUnavailableError, InvalidConfigurationError, NotFoundError
from linkproxy.models import FileItem, LinkRecordModel, SourceType
from linkproxy.types import SourceConfig
from linkproxy.utils import paths
from linkproxy.utils.helpers import parse_timestamp


logger = logging.getLogger(__name__)

LIST_ENDPOINT = '/api/fs/list'
DOWNLOAD_PREFIX = '/d'

# Message AList returns (with code 500) for a path that does not exist
OBJECT_NOT_FOUND = 'object not found'


class AListBackend(SourceBackend):
    """Backend for folders hosted on an AList server

    Example:
        >>> backend = AListBackend(EngineConfig(alist_api_url='https://alist.example.org'), httpx.Client())
        >>> [item.name for item in backend.list_files('/docs', {})]
        ['guide', 'readme.md']
        >>> backend.resolve_download('guide/intro.pdf', record)
        'https://alist.example.org/d/docs/guide/intro.pdf'
    """

    source_tag = SourceType.ALIST.value

    @property
    def api_url(self) -> str:
        if not self.config.alist_api_url:
            raise InvalidConfigurationError('AList backend requires alist_api_url to be configured.')
        return self.config.alist_api_url.rstrip('/')

    @handle_http_error
    def list_files(self, path: str, config: SourceConfig) -> list[FileItem]:
        """List the immediate children of an AList folder

        Args:
            path (str):
                Folder path on the AList server. Normalized before the call.
            config (SourceConfig):
                Record source config. Only an optional folder "password" is used.

        Returns:
            list[FileItem]: entries in upstream order.

        Raises:
            NotFoundError: If the folder does not exist.
            BackendUnavailableError: On any other upstream failure.
            InvalidConfigurationError: If no AList server is configured.
        """
        folder = paths.normalize(path)
        payload = {
            'path': folder,
            'password': config.get('password', ''),
            'page': 1,
            'per_page': 0,
            'refresh': False,
        }
        headers = {'Authorization': self.config.alist_token} if self.config.alist_token else {}

        logger.debug('Listing AList folder.', extra={'path': folder})
        response = self.client.post(f'{self.api_url}{LIST_ENDPOINT}', json=payload, headers=headers)
        raise_for_upstream_status(response, f"AList folder '{folder}'")

        body = response.json()
        code = body.get('code', 200)
        if code != 200:
            message = str(body.get('message') or 'unknown error')
            if code == 404 or OBJECT_NOT_FOUND in message.lower():
                raise NotFoundError(f"AList folder '{folder}' not found.")
            raise BackendUnavailableError(f'AList responded with code {code}: {message}')

        content = (body.get('data') or {}).get('content') or []

        # fmt: off
        return [
            FileItem(
                name=entry['name'],
                size=int(entry.get('size') or 0),
                is_directory=bool(entry.get('is_dir')),
                modified_at=parse_timestamp(entry.get('modified')),
                download_locator=None if entry.get('is_dir') else self._direct_link(paths.join(folder, entry['name'])),
                source_tag=self.source_tag,
            )
            for entry in content
        ]
        # fmt: on

    def resolve_download(self, sub_path: str, record: LinkRecordModel) -> str:
        """Build the direct download URL of a file below the record's root (no upstream call)."""
        return self._direct_link(paths.join(record.target, sub_path))

    def _direct_link(self, path: str) -> str:
        return f'{self.api_url}{DOWNLOAD_PREFIX}{urllib.parse.quote(paths.normalize(path))}'
