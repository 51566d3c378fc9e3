"""Fetching resolved files from their upstream location

Classes:
    DownloadedFile:
        Upstream response body and the headers to hand back to the client.
    Downloader:
        GET / HEAD a download locator with a restricted set of request headers.

Functions:
    extract_filename(url: str) -> str
        Derive a file name from a URL ('filename' / 'name' query params, else last path segment).
    content_disposition(filename: str) -> str
        Build an RFC 6266 attachment header carrying the UTF-8 file name.

Example:
    >>> downloader = Downloader(httpx.Client(follow_redirects=True))
    >>> file = downloader.fetch('https://example.org/a.bin', {'Range': 'bytes=0-99'})
    >>> file.status_code, file.headers['content-range']
    (206, 'bytes 0-99/1024')
"""

import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Optional

import httpx

from linkproxy.exceptions import BackendUnavailableError
from linkproxy.types import Headers
from linkproxy.utils.constants import FORWARDED_DOWNLOAD_HEADERS


logger = logging.getLogger(__name__)

DEFAULT_FILENAME = 'unknown'

# Upstream response headers passed back to the client
PASSTHROUGH_RESPONSE_HEADERS = ('content-type', 'content-length', 'content-range', 'accept-ranges', 'last-modified', 'etag')


def extract_filename(url: str) -> str:
    """Derive a display file name from a URL

    Example:
        >>> extract_filename('https://example.org/get?id=1&filename=report.pdf')
        'report.pdf'
        >>> extract_filename('https://example.org/files/a%20b.bin')
        'a b.bin'
    """
    components = urllib.parse.urlsplit(url)
    query = urllib.parse.parse_qs(components.query)

    for candidate in (*query.get('filename', []), *query.get('name', [])):
        if candidate:
            return candidate

    last_segment = urllib.parse.unquote(components.path.rstrip('/').rsplit('/', 1)[-1])
    return last_segment or DEFAULT_FILENAME


def content_disposition(filename: str) -> str:
    """Return an attachment Content-Disposition with a quoted name and a UTF-8 `filename*`."""
    fallback = filename.replace('\\', '\\\\').replace('"', '\\"')
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{urllib.parse.quote(filename, safe="")}'


def forwardable_headers(request_headers: Optional[Headers]) -> Headers:
    """Keep only the request headers allowed to reach an upstream download (case-insensitive)."""
    return {name.lower(): value for name, value in (request_headers or {}).items() if name.lower() in FORWARDED_DOWNLOAD_HEADERS and value}


@dataclass(frozen=True)
class DownloadedFile:
    """Upstream file response ready to be relayed

    Attributes:
        status_code (int): upstream status (200, or 206 for range requests).
        content (bytes): response body.
        headers (Headers): selected upstream headers plus Content-Disposition.
    """

    status_code: int
    content: bytes
    headers: Headers = field(default_factory=dict)


class Downloader:
    """Retrieve files from resolved download locators

    Args:
        client (httpx.Client):
            HTTP client. Redirects are followed on every request.
    """

    def __init__(self, client: httpx.Client):
        self.client = client

    def fetch(self, locator: str, request_headers: Optional[Headers] = None, forward_headers: Optional[Headers] = None, filename: Optional[str] = None) -> DownloadedFile:
        """GET a file from its upstream location

        Args:
            locator (str):
                Download URL produced by a backend.
            request_headers (Optional[Headers]):
                Client request headers. Only range / accept / accept-encoding are forwarded.
            forward_headers (Optional[Headers]):
                Internal headers added to the upstream request (e.g. the access code).
            filename (Optional[str]):
                Name to advertise in Content-Disposition. Derived from the final URL when omitted.

        Returns:
            DownloadedFile: upstream status, body and relayed headers.

        Raises:
            BackendUnavailableError: If the upstream cannot be reached or answers with an error status.
        """
        headers = {**forwardable_headers(request_headers), **(forward_headers or {})}

        logger.debug('Fetching upstream file.', extra={'locator': locator})
        try:
            response = self.client.get(locator, headers=headers, follow_redirects=True)
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f'Failed to fetch file: {e}') from e

        if response.status_code >= 400:
            raise BackendUnavailableError(f'Upstream responded with status {response.status_code} for the requested file.')

        relayed = {name: response.headers[name] for name in PASSTHROUGH_RESPONSE_HEADERS if name in response.headers}
        relayed['content-disposition'] = content_disposition(filename or extract_filename(str(response.url)))
        return DownloadedFile(status_code=response.status_code, content=response.content, headers=relayed)

    def file_size(self, locator: str, forward_headers: Optional[Headers] = None) -> int:
        """HEAD a file and return its Content-Length (0 when unknown or unreachable)."""
        try:
            response = self.client.head(locator, headers=forward_headers or {}, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning('Failed to fetch file size.', extra={'locator': locator, 'error': str(e)})
            return 0

        if not response.is_success:
            return 0
        try:
            return int(response.headers.get('content-length', 0))
        except ValueError:
            return 0
