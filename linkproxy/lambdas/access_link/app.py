import json
import html
import base64
import logging

from linkproxy.backends import BackendRegistry
from linkproxy.dao import LinkRecordDAO
from linkproxy.dao.redis import RedisKeyValueStore
from linkproxy.exceptions import BackendUnavailableError
from linkproxy.services import (
    Downloader,
    FileLocation,
    FolderListing,
    GatePage,
    LinkResolver,
    ResolutionFailure,
    ResolutionRequest,
)
from linkproxy.types import LambdaContext, LambdaEvent, LambdaResponse
from linkproxy.utils import EngineConfig, app_prefix, get_short_url, load_config
from linkproxy.utils.constants import COUNTRY_HEADER
from linkproxy.utils.helpers import guarantee_500_response
from linkproxy.lambdas.access_link.constants import (
    MISSING_SHORTCODE,
    REGION_NOT_ALLOWED,
    ACCESS_CODE_REQUIRED,
    FOLDER_LISTED,
    FILE_INFO_SERVED,
    FILE_DOWNLOADED,
    DOWNLOAD_FAILED,
    RESOLUTION_FAILED,
)


logger = logging.getLogger(__name__)

GATE_PAGE_HTML = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Access code required</title></head>
<body>
<form method="get" action="{action}">
{hidden}<label for="code">Access code</label>
<input type="password" id="code" name="code" autofocus required>
<button type="submit">Open</button>
</form>
</body>
</html>
"""


def response_json(status_code: int, body: dict) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body, ensure_ascii=False),
    }


def response_error(status_code: int, message: str, error_code: str) -> LambdaResponse:
    return response_json(status_code, {'message': message, 'errorCode': error_code})


def response_gate(action: str, query: dict[str, str]) -> LambdaResponse:
    # Only `code` is replaced; the rest of the query rides along as hidden fields
    hidden = ''.join(
        f'<input type="hidden" name="{html.escape(name, quote=True)}" value="{html.escape(value or "", quote=True)}">\n'
        for name, value in query.items()
        if name != 'code'
    )
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'text/html;charset=UTF-8'},
        'body': GATE_PAGE_HTML.format(action=html.escape(action, quote=True), hidden=hidden),
    }


def response_file(status_code: int, content: bytes, headers: dict[str, str]) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {**headers, 'Access-Control-Allow-Origin': '*'},
        'body': base64.b64encode(content).decode('ascii'),
        'isBase64Encoded': True,
    }


def request_header(event: LambdaEvent, name: str) -> str | None:
    name = name.lower()
    headers = event.get('headers') or {}
    return next((value for key, value in headers.items() if key.lower() == name), None)


# Shared by warm invocations of the same container
_registry: BackendRegistry | None = None


def backend_registry(engine_config: EngineConfig) -> BackendRegistry:
    """Return the container's BackendRegistry, rebuilding it when the configuration changes

    One httpx connection pool is kept per container; the replaced registry
    is closed.
    """
    global _registry
    if _registry is None or _registry.config != engine_config:
        if _registry is not None:
            _registry.close()
        _registry = BackendRegistry(engine_config)
    return _registry


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle API Gateway requests for short links (GET /s/{shortcode}/{proxy+})

    This Lambda handler follows this procedure:
    - Step 1: Refuse clients outside the region allow-list
    - Step 2: Extract shortcode and sub-path from request path
    - Step 3: Resolve the link (access code, expiry, quota, dispatch)
    - Step 4: Render the resolution (gate page, listing, file info or file content)

    HTTP responses:
        200: Gate page (HTML), folder listing (JSON), file info (JSON) or file content (base64)
        206: Partial file content (range requests)
        400: Missing shortcode in path
        403: Client region not allowed
        404: Unknown short code or sub-path
        410: Link expired or visit limit exceeded
        500: Backend failure or internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortcode': 'k3x9q', 'proxy': 'guide'}}
        >>> response = lambda_handler(event, None)
        >>> json.loads(response['body'])['path']
        '/docs/guide'
    """
    # 0- Get application's config
    app_config = load_config('access_link')
    engine_config = EngineConfig.from_dict(app_config)

    # 1- Refuse clients outside the region allow-list
    region = request_header(event, COUNTRY_HEADER)
    if not engine_config.region_allowed(region):
        logger.info('Client region not allowed. Responding with 403.', extra={'region': region, 'event': REGION_NOT_ALLOWED})
        return response_error(403, 'Access Denied', REGION_NOT_ALLOWED)

    # 2- Extract shortcode and sub-path from request's path
    path_parameters = event.get('pathParameters') or {}
    shortcode = path_parameters.get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_error(400, "Bad Request (missing 'shortcode' in path)", MISSING_SHORTCODE)

    request = ResolutionRequest(
        shortcode=shortcode,
        sub_path=path_parameters.get('proxy') or '',
        query=event.get('queryStringParameters') or {},
        headers=event.get('headers') or {},
    )

    # 3- Resolve the link
    store = RedisKeyValueStore.from_config(app_config['redis'], prefix=app_prefix())
    registry = backend_registry(engine_config)
    resolver = LinkResolver(LinkRecordDAO(store), registry)
    resolution = resolver.resolve(request)

    # 4- Render the resolution
    if isinstance(resolution, GatePage):
        logger.info('Access code required. Responding with gate page.', extra={'shortcode': shortcode, 'event': ACCESS_CODE_REQUIRED})
        action = get_short_url(shortcode, event) + (f'/{request.sub_path}' if request.sub_path else '')
        return response_gate(action, request.query)

    if isinstance(resolution, ResolutionFailure):
        logger.info(
            'Link resolution failed. Responding with %s.',
            resolution.status_code,
            extra={'shortcode': shortcode, 'event': RESOLUTION_FAILED, 'error_code': resolution.error.error_code},
        )
        return response_error(resolution.status_code, resolution.message, resolution.error.error_code)

    if isinstance(resolution, FolderListing):
        logger.info('Serving folder listing. Responding with 200.', extra={'shortcode': shortcode, 'event': FOLDER_LISTED})
        return response_json(
            200,
            {
                'shortcode': shortcode,
                'path': resolution.path,
                'items': [item.to_dict() for item in resolution.items],
            },
        )

    downloader = Downloader(registry.client)
    location: FileLocation = resolution

    if not location.download:
        size = downloader.file_size(location.locator, forward_headers=location.forward_headers)
        logger.info('Serving file info. Responding with 200.', extra={'shortcode': shortcode, 'event': FILE_INFO_SERVED})
        return response_json(200, {'shortcode': shortcode, 'name': location.filename, 'size': size})

    try:
        downloaded = downloader.fetch(
            location.locator,
            request_headers=event.get('headers') or {},
            forward_headers=location.forward_headers,
            filename=location.filename,
        )
    except BackendUnavailableError as e:
        logger.warning('Upstream download failed. Responding with 500.', extra={'shortcode': shortcode, 'event': DOWNLOAD_FAILED})
        return response_error(500, str(e), e.error_code)

    logger.info('Serving file content.', extra={'shortcode': shortcode, 'event': FILE_DOWNLOADED, 'status_code': downloaded.status_code})
    return response_file(downloaded.status_code, downloaded.content, downloaded.headers)
