"""Request-time resolution of short links

Every request for a short code walks the same gates, in order, and stops at
the first one that produces a result:

    1- Lookup        unknown code                         -> NotFound (404)
    2- Access code   code missing or wrong                -> gate page (200)
    3- Expiry        now > expireAt                       -> Gone (410)
    4- Quota         visits >= maxVisits                  -> Gone (410)
                     otherwise visits += 1 and persist
    5- Dispatch      folder                               -> listing
                     file, or folder + ?type=file         -> file location

Backend failures end up as a ResolutionFailure carrying the backend's error
(500 unless the backend reported NotFound).

Example:
    >>> resolver = LinkResolver(dao, registry)
    >>> resolver.resolve(ResolutionRequest(shortcode='k3x9q', sub_path='guide'))
    FolderListing(shortcode='k3x9q', path='/docs/guide', items=[...])
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional
from collections.abc import Callable

from linkproxy.backends import BackendRegistry
from linkproxy.dao import LinkRecordDAO
from linkproxy.exceptions import AccessDeniedError, GoneError, LinkProxyError
from linkproxy.models import FileItem, LinkRecordModel
from linkproxy.services.downloads import extract_filename
from linkproxy.types import Headers
from linkproxy.utils import paths
from linkproxy.utils.constants import ACCESS_CODE_HEADER
from linkproxy.utils.helpers import now_ms


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionRequest:
    """Inbound request for a short link

    Attributes:
        shortcode (str): requested short code.
        sub_path (str): path below the link's root ('' for the root itself).
        query (dict[str, str]): query string parameters ('code', 'type', 'download').
        headers (Headers): request headers (looked up case-insensitively).
    """

    shortcode: str
    sub_path: str = ''
    query: dict[str, str] = field(default_factory=dict)
    headers: Headers = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        return next((value for key, value in self.headers.items() if key.lower() == name), None)

    @property
    def wants_file(self) -> bool:
        return self.query.get('type') == 'file'

    @property
    def wants_download(self) -> bool:
        return self.query.get('download') == '1'


@dataclass(frozen=True)
class GatePage:
    """Access code required (or wrong). Not an error: rendered as a 200 form."""

    shortcode: str
    status_code: int = 200


@dataclass(frozen=True)
class FolderListing:
    shortcode: str
    path: str
    items: list[FileItem]
    status_code: int = 200


@dataclass(frozen=True)
class FileLocation:
    """A resolved file

    Attributes:
        shortcode (str): requested short code.
        locator (str): URL the file can be fetched from.
        filename (str): display name of the file.
        download (bool): True to stream the content, False for an informational response.
        forward_headers (Headers): internal headers to send along with the upstream request.
    """

    shortcode: str
    locator: str
    filename: str
    download: bool
    forward_headers: Headers = field(default_factory=dict)
    status_code: int = 200


@dataclass(frozen=True)
class ResolutionFailure:
    error: LinkProxyError

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def message(self) -> str:
        return str(self.error)


type Resolution = GatePage | FolderListing | FileLocation | ResolutionFailure


class LinkResolver:
    """Resolve short link requests against the link store and source backends

    Args:
        dao (LinkRecordDAO):
            Link record store.
        registry (BackendRegistry):
            Source type -> backend lookup.
        clock (Callable[[], int]):
            Current time in milliseconds since the epoch. Defaults to now_ms.
    """

    def __init__(self, dao: LinkRecordDAO, registry: BackendRegistry, clock: Callable[[], int] = now_ms):
        self.dao = dao
        self.registry = registry
        self.clock = clock

    def resolve(self, request: ResolutionRequest) -> Resolution:
        """Run a request through the gates and dispatch it

        Never raises LinkProxyError: application errors are returned as
        ResolutionFailure. Anything else propagates.
        """
        try:
            record = self.dao.get(request.shortcode)
            forward_headers = self._check_access_code(record, request)
            self._check_expiry(record)
            self._count_visit(record)
            return self._dispatch(record, request, forward_headers)
        except AccessDeniedError:
            logger.info('Access code missing or wrong. Serving gate page.', extra={'shortcode': request.shortcode})
            return GatePage(shortcode=request.shortcode)
        except LinkProxyError as e:
            logger.info(
                'Link resolution failed.',
                extra={'shortcode': request.shortcode, 'error_code': e.error_code, 'status_code': e.status_code},
            )
            return ResolutionFailure(error=e)

    def _check_access_code(self, record: LinkRecordModel, request: ResolutionRequest) -> Headers:
        """Return the headers forwarding the accepted access code (empty for unprotected links)."""
        if not record.access_code:
            return {}

        supplied = (request.query.get('code'), request.header(ACCESS_CODE_HEADER))
        if record.access_code not in supplied:
            raise AccessDeniedError(f"Access code required for '{record.shortcode}'.")
        return {ACCESS_CODE_HEADER: record.access_code}

    def _check_expiry(self, record: LinkRecordModel) -> None:
        if record.is_expired(self.clock()):
            raise GoneError('Link expired')

    def _count_visit(self, record: LinkRecordModel) -> None:
        if record.max_visits is None:
            return
        if record.quota_exhausted:
            raise GoneError('Visit limit exceeded')

        # NOTE: Read-increment-write without any lock or conditional write.
        #       Two concurrent requests can both read visits = n and both
        #       write n + 1, losing one count and letting one extra visit
        #       through past maxVisits:
        #
        #       (request 1): dao.get() -> visits = 0
        #       (request 2): dao.get() -> visits = 0
        #       (request 1): dao.save(visits = 1)
        #       (request 2): dao.save(visits = 1)
        self.dao.save(replace(record, visits=record.visits + 1))

    def _dispatch(self, record: LinkRecordModel, request: ResolutionRequest, forward_headers: Headers) -> Resolution:
        backend = self.registry.resolve(record.source_type)
        sub_path = paths.normalize(request.sub_path)
        has_sub_path = sub_path != paths.SEPARATOR

        if record.is_folder and not (has_sub_path and request.wants_file):
            path = paths.join(record.target, sub_path)
            items = backend.list_files(path, record.source_config)
            logger.info('Serving folder listing.', extra={'shortcode': record.shortcode, 'path': path, 'count': len(items)})
            return FolderListing(shortcode=record.shortcode, path=path, items=items)

        locator = backend.resolve_download(sub_path if has_sub_path else '', record)
        filename = paths.split(sub_path)[-1] if has_sub_path else extract_filename(record.target)

        # Plain file links without an access code stream straight away; links
        # behind a code or below a folder get an info page unless ?download=1.
        download = request.wants_download or not (has_sub_path or record.access_code)

        logger.info('Serving file location.', extra={'shortcode': record.shortcode, 'download': download})
        return FileLocation(
            shortcode=record.shortcode,
            locator=locator,
            filename=filename,
            download=download,
            forward_headers=forward_headers,
        )
