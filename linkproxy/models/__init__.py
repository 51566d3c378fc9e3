from linkproxy.models.link_record_model import LinkRecordModel, LinkKind, SourceType, infer_kind
from linkproxy.models.file_item_model import FileItem


__all__ = [
    'LinkRecordModel',
    'LinkKind',
    'SourceType',
    'infer_kind',
    'FileItem',
]
