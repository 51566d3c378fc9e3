import json
import logging

from beartype.roar import BeartypeCallHintParamViolation

from linkproxy.dao import LinkRecordDAO
from linkproxy.dao.redis import RedisKeyValueStore
from linkproxy.exceptions import LinkProxyError, InvalidConfigurationError
from linkproxy.models import LinkRecordModel
from linkproxy.services import LinkAdmin
from linkproxy.types import LambdaContext, LambdaEvent, LambdaResponse
from linkproxy.utils import EngineConfig, app_prefix, get_short_url, load_config, paths
from linkproxy.utils.helpers import guarantee_500_response
from linkproxy.lambdas.manage_links.constants import (
    ROUTE_NOT_FOUND,
    INVALID_JSON,
    INVALID_PARAMETERS,
    LINK_CREATED,
    LINK_UPDATED,
    LINK_DELETED,
    LINKS_LISTED,
    EXPIRED_CLEARED,
)


logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PATH = '/admin'

# JSON body field -> LinkAdmin.update() keyword
UPDATE_FIELDS = {
    'expireAt': 'expire_at',
    'maxVisits': 'max_visits',
    'accessCode': 'access_code',
}


def response_json(status_code: int, body: dict) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': '*',
        },
        'body': json.dumps(body, ensure_ascii=False),
    }


def response_error(status_code: int, message: str, error_code: str) -> LambdaResponse:
    return response_json(status_code, {'message': message, 'errorCode': error_code})


def link_summary(record: LinkRecordModel, event: LambdaEvent) -> dict:
    return {'shortcode': record.shortcode, 'short_url': get_short_url(record.shortcode, event), **record.to_dict()}


def parse_body(event: LambdaEvent) -> dict:
    body = json.loads(event.get('body') or '{}')
    if not isinstance(body, dict):
        raise ValueError('JSON body must be an object')
    return body


def create_link(admin: LinkAdmin, event: LambdaEvent) -> LambdaResponse:
    body = parse_body(event)
    record = admin.create(
        str(body.get('url') or ''),
        expire_at=body.get('expireAt'),
        max_visits=body.get('maxVisits'),
        access_code=body.get('accessCode'),
        source_type=body.get('sourceType'),
        source_config=body.get('sourceConfig'),
        kind=body.get('type'),
    )
    logger.info('Created link. Responding with 200.', extra={'shortcode': record.shortcode, 'event': LINK_CREATED})
    return response_json(200, {'code': record.shortcode, **link_summary(record, event)})


def update_link(admin: LinkAdmin, event: LambdaEvent, shortcode: str) -> LambdaResponse:
    body = parse_body(event)
    changes = {keyword: body[field] for field, keyword in UPDATE_FIELDS.items() if field in body}
    record = admin.update(shortcode, **changes)
    logger.info('Updated link. Responding with 200.', extra={'shortcode': shortcode, 'event': LINK_UPDATED})
    return response_json(200, link_summary(record, event))


def delete_link(admin: LinkAdmin, event: LambdaEvent, shortcode: str) -> LambdaResponse:
    admin.delete(shortcode)
    logger.info('Deleted link. Responding with 200.', extra={'shortcode': shortcode, 'event': LINK_DELETED})
    return response_json(200, {'message': 'ok', 'shortcode': shortcode})


def list_links(admin: LinkAdmin, event: LambdaEvent) -> LambdaResponse:
    links = [link_summary(record, event) for _, record in admin.list_links()]
    logger.info('Listed links. Responding with 200.', extra={'count': len(links), 'event': LINKS_LISTED})
    return response_json(200, {'links': links, 'total': len(links)})


def clear_expired(admin: LinkAdmin, event: LambdaEvent) -> LambdaResponse:
    cleared_count = admin.clear_expired()
    logger.info('Cleared expired links. Responding with 200.', extra={'cleared_count': cleared_count, 'event': EXPIRED_CLEARED})
    return response_json(200, {'clearedCount': cleared_count})


def route(event: LambdaEvent, admin_path: str) -> tuple[str, str | None] | None:
    """Map (method, path) to an admin action and optional short code

    Routes (relative to the admin path):
        GET    /links               -> list
        POST   /links               -> create
        PATCH  /links/{shortcode}   -> update
        DELETE /links/{shortcode}   -> delete
        POST   /clear-expired       -> clear_expired
    """
    method = (event.get('httpMethod') or '').upper()
    path = paths.normalize(event.get('path'))
    root = paths.normalize(admin_path)

    if root != paths.SEPARATOR:
        if path != root and not path.startswith(root + paths.SEPARATOR):
            return None
        path = paths.normalize(path[len(root):])

    segments = paths.split(path)
    match method, segments:
        case 'GET', ['links']:
            return 'list', None
        case 'POST', ['links']:
            return 'create', None
        case 'PATCH', ['links', shortcode]:
            return 'update', shortcode
        case 'DELETE', ['links', shortcode]:
            return 'delete', shortcode
        case 'POST', ['clear-expired']:
            return 'clear_expired', None
    return None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle administrative API Gateway requests on link records

    This Lambda handler follows this procedure:
    - Step 1: Route the request below the configured admin path
    - Step 2: Run the admin operation (create, update, delete, list, clear expired)
    - Step 3: Map application errors to JSON error responses

    HTTP responses:
        200: Operation succeeded
        400: Invalid JSON body, invalid link parameters or backend configuration
        404: Unknown route or unknown short code
        500: Data store failure, code generation exhausted or internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'httpMethod': 'POST', 'path': '/admin/links', 'body': '{"url": "https://example.org/a.bin"}'}
        >>> json.loads(lambda_handler(event, None)['body'])['code']
        '15qmil'
    """
    # 0- Get application's config
    app_config = load_config('manage_links')
    engine_config = EngineConfig.from_dict(app_config)

    # 1- Route the request
    matched = route(event, engine_config.admin_path or DEFAULT_ADMIN_PATH)
    if matched is None:
        logger.info('Unknown admin route. Responding with 404.', extra={'path': event.get('path'), 'event': ROUTE_NOT_FOUND})
        return response_error(404, 'Not Found', ROUTE_NOT_FOUND)
    action, shortcode = matched

    store = RedisKeyValueStore.from_config(app_config['redis'], prefix=app_prefix())
    admin = LinkAdmin(LinkRecordDAO(store))

    # 2- Run the admin operation
    try:
        match action:
            case 'create':
                return create_link(admin, event)
            case 'update':
                return update_link(admin, event, shortcode)
            case 'delete':
                return delete_link(admin, event, shortcode)
            case 'list':
                return list_links(admin, event)
            case _:
                return clear_expired(admin, event)
    # 3- Map application errors to responses
    except BeartypeCallHintParamViolation:
        logger.info('Invalid link parameters. Responding with 400.', extra={'shortcode': shortcode, 'event': INVALID_PARAMETERS})
        return response_error(400, 'Bad Request (invalid parameter types)', INVALID_PARAMETERS)
    except ValueError as e:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON})
        return response_error(400, f'Bad Request ({e})', INVALID_JSON)
    except InvalidConfigurationError as e:
        logger.info('Invalid link configuration. Responding with 400.', extra={'shortcode': shortcode, 'event': e.error_code})
        return response_error(400, str(e), e.error_code)
    except LinkProxyError as e:
        logger.info('Admin operation failed. Responding with %s.', e.status_code, extra={'shortcode': shortcode, 'event': e.error_code})
        return response_error(e.status_code, str(e), e.error_code)
