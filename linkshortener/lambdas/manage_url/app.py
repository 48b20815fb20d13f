import logging
from collections.abc import Callable

from linkshortener.types import LambdaEvent, LambdaContext, LambdaResponse

from linkshortener.models import UrlRecordPatch
from linkshortener.services import ShortenerService
from linkshortener.exceptions import ForbiddenError, ValidationError
from linkshortener.dao.exceptions import DataStoreError, RecordNotFoundError, ShortCodeAlreadyExistsError
from linkshortener.utils import get_short_url, guarantee_500_response
from linkshortener.lambdas.events import json_body, path_parameter, query_parameter, requester_id
from linkshortener.lambdas.dependencies import build_shortener_service
from linkshortener.lambdas.responses import (
    response_200,
    response_204,
    response_400,
    response_401,
    response_403,
    response_404,
    response_409,
    response_500,
)
from linkshortener.lambdas.manage_url.constants import (
    MISSING_USER_ID,
    MISSING_URL_ID,
    INVALID_JSON_BODY,
    INVALID_INPUT,
    URL_NOT_FOUND,
    FORBIDDEN,
    SHORTCODE_CONFLICT,
    DATA_STORE_UNAVAILABLE,
    ROUTE_NOT_FOUND,
)


logger = logging.getLogger(__name__)


def _url_body(url, event: dict) -> dict:
    return {**url.to_dict(), 'shortUrl': get_short_url(url.short_code, event)}


def _int_parameter(event: dict, name: str) -> int | None:
    value = query_parameter(event, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'Invalid {name}: {value!r} is not an integer.', field=name) from None


def list_urls(service: ShortenerService, event: dict, user_id: str | None) -> dict:
    """GET /urls: the caller's URLs, newest first (`limit`, `offset` query parameters)"""
    if user_id is None:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
        return response_401(message="missing 'sub' in JWT claims", error_code=MISSING_USER_ID)

    limit = _int_parameter(event, 'limit')
    offset = _int_parameter(event, 'offset') or 0
    urls = service.list_urls(user_id, limit=limit, offset=offset)

    logger.debug('Listed URL records.', extra={'userId': user_id, 'count': len(urls)})
    return response_200({'urls': [_url_body(url, event) for url in urls], 'count': len(urls), 'offset': offset})


def get_url(service: ShortenerService, event: dict, user_id: str | None, url_id: str) -> dict:
    return response_200(_url_body(service.get_url(url_id, user_id), event))


def update_url(service: ShortenerService, event: dict, user_id: str | None, url_id: str) -> dict:
    if user_id is None:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
        return response_401(message="missing 'sub' in JWT claims", error_code=MISSING_USER_ID)

    try:
        request_body = json_body(event)
    except ValueError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    patch = UrlRecordPatch(
        short_code=request_body.get('customCode') or None,
        title=request_body.get('title'),
        description=request_body.get('description'),
    )
    url = service.update_url(url_id, user_id, patch)
    return response_200(_url_body(url, event))


def delete_url(service: ShortenerService, event: dict, user_id: str | None, url_id: str) -> dict:
    if user_id is None:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
        return response_401(message="missing 'sub' in JWT claims", error_code=MISSING_USER_ID)

    service.delete_url(url_id, user_id)
    return response_204()


ITEM_ROUTES: dict[str, Callable[..., dict]] = {
    'GET': get_url,
    'PATCH': update_url,
    'DELETE': delete_url,
}


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to manage URL records

    Routes:
        GET    /urls        list the caller's URLs (authentication required)
        GET    /urls/{id}   read one URL record
        PATCH  /urls/{id}   change short code, title or description (owner only)
        DELETE /urls/{id}   delete a URL record (owner only)

    HTTP responses:
        200: URL record(s)
        204: URL record deleted
        400: invalid JSON body, query parameter or input constraint violation
        401: missing Cognito user id where one is required
        403: caller is not the owner of the URL record
        404: URL record not found (or unknown route)
        409: new short code already taken
        500: data store unavailable
    """
    method = (event.get('httpMethod') or '').upper()
    resource = event.get('resource') or ''
    user_id = requester_id(event)
    url_id = path_parameter(event, 'id')

    try:
        service = build_shortener_service('manage_url')

        if resource.rstrip('/') == '/urls' and method == 'GET':
            return list_urls(service, event, user_id)

        route = ITEM_ROUTES.get(method)
        if route is None or not resource.startswith('/urls/'):
            logger.info('Unknown route. Responding with 404.', extra={'event': ROUTE_NOT_FOUND, 'method': method, 'resource': resource})
            return response_404(message=f'no route for {method} {resource}', error_code=ROUTE_NOT_FOUND)
        if url_id is None:
            logger.info("Missing 'id' in path. Responding with 400.", extra={'event': MISSING_URL_ID})
            return response_400(message="missing 'id' in path", error_code=MISSING_URL_ID)

        return route(service, event, user_id, url_id)
    except ValidationError as e:
        logger.info('Invalid input. Responding with 400.', extra={'event': INVALID_INPUT, 'field': e.field, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_INPUT, field=e.field)
    except RecordNotFoundError as e:
        logger.info('URL record not found. Responding with 404.', extra={'event': URL_NOT_FOUND, 'recordId': url_id})
        return response_404(message=str(e), error_code=URL_NOT_FOUND)
    except ForbiddenError as e:
        logger.info('Caller does not own URL record. Responding with 403.', extra={'event': FORBIDDEN, 'recordId': url_id, 'userId': user_id})
        return response_403(message=str(e), error_code=FORBIDDEN)
    except ShortCodeAlreadyExistsError as e:
        logger.info('Requested short code is taken. Responding with 409.', extra={'event': SHORTCODE_CONFLICT, 'recordId': url_id})
        return response_409(message=str(e), error_code=SHORTCODE_CONFLICT)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'event': DATA_STORE_UNAVAILABLE})
        return response_500(error_code=DATA_STORE_UNAVAILABLE)
