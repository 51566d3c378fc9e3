"""Backend for links whose target is an arbitrary external URL

The target is proxied as-is. There is nothing to browse and no sub-path to
resolve below a single URL.
"""

from linkproxy.backends.base import SourceBackend
from linkproxy.exceptions import NotFoundError
from linkproxy.models import FileItem, LinkRecordModel, SourceType
from linkproxy.types import SourceConfig
from linkproxy.utils import paths


class DirectBackend(SourceBackend):
    source_tag = SourceType.NONE.value

    def list_files(self, path: str, config: SourceConfig) -> list[FileItem]:
        raise NotFoundError('External URL targets cannot be browsed.')

    def resolve_download(self, sub_path: str, record: LinkRecordModel) -> str:
        if paths.split(sub_path):
            raise NotFoundError(f"'{paths.normalize(sub_path)}' does not exist below an external URL.")
        return record.target
