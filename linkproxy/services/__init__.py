from linkproxy.services.admin import LinkAdmin
from linkproxy.services.downloads import Downloader, DownloadedFile, content_disposition, extract_filename
from linkproxy.services.resolver import (
    LinkResolver,
    ResolutionRequest,
    Resolution,
    GatePage,
    FolderListing,
    FileLocation,
    ResolutionFailure,
)


__all__ = [
    'LinkAdmin',
    'Downloader',
    'DownloadedFile',
    'content_disposition',
    'extract_filename',
    'LinkResolver',
    'ResolutionRequest',
    'Resolution',
    'GatePage',
    'FolderListing',
    'FileLocation',
    'ResolutionFailure',
]
