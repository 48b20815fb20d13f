import logging
from datetime import datetime
from typing import Any

from linkshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from linkshortener.exceptions import ValidationError
from linkshortener.dao.exceptions import DataStoreError, ShortCodeAlreadyExistsError, ShortCodeGenerationError
from linkshortener.utils import get_short_url, guarantee_500_response
from linkshortener.lambdas.events import json_body, requester_id
from linkshortener.lambdas.dependencies import build_shortener_service
from linkshortener.lambdas.responses import response_201, response_400, response_409, response_500
from linkshortener.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_ORIGINAL_URL,
    INVALID_INPUT,
    SHORTCODE_CONFLICT,
    SHORTCODE_GENERATION_FAILED,
    DATA_STORE_UNAVAILABLE,
    URL_SHORTENED,
)


logger = logging.getLogger(__name__)


def _parse_expires_at(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError('Invalid expiry: must be an ISO-8601 string.', field='expiresAt')
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f'Invalid expiry: {value!r} is not an ISO-8601 date-time.', field='expiresAt') from None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs (POST /urls)

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Extract (optional) Amazon Cognito user id from Lambda event
    - Step 2: Parse original URL and link metadata from request body
    - Step 3: Allocate a short code and store the URL record (via ShortenerService)
    - Step 4: Respond to user with 201 created

    HTTP responses:
        201: Successful URL shortening
            body: the created URL record (see UrlRecordModel.to_dict) plus `shortUrl`
        400: Bad client request
            message: invalid JSON, missing 'originalUrl' or an input constraint violation
        409: Conflict
            message: requested custom short code is already taken
        500: Internal server error
            message: data store unavailable or short code generation exhausted

    Request body:
        {
            "originalUrl": "https://example.com/blog/article-123",   (required)
            "customCode": "my-article",                               (optional, 3-50 chars)
            "title": "My article",                                    (optional, <=200 chars)
            "description": "...",                                     (optional, <=500 chars)
            "expiresAt": "2026-12-31T23:59:59+00:00"                  (optional)
        }

    Example:
        >>> event = {'body': '{"originalUrl": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['shortUrl']
        'http://localhost:3000/Xb3_k9Q'
    """
    # 1- Extract user id from Cognito (anonymous shortening is allowed)
    user_id = requester_id(event)

    # 2- Extract original URL and metadata from request body
    try:
        request_body = json_body(event)
    except ValueError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    original_url = request_body.get('originalUrl')
    if not original_url:
        logger.info("Missing 'originalUrl' in body. Responding with 400.", extra={'event': MISSING_ORIGINAL_URL})
        return response_400(message="missing 'originalUrl' in JSON body", error_code=MISSING_ORIGINAL_URL, field='originalUrl')

    # 3- Allocate short code and store URL record
    try:
        service = build_shortener_service('shorten_url')
        url = service.shorten(
            original_url,
            custom_code=request_body.get('customCode') or None,
            title=request_body.get('title'),
            description=request_body.get('description'),
            owner_id=user_id,
            expires_at=_parse_expires_at(request_body.get('expiresAt')),
        )
    except ValidationError as e:
        logger.info('Invalid input. Responding with 400.', extra={'event': INVALID_INPUT, 'field': e.field, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_INPUT, field=e.field)
    except ShortCodeAlreadyExistsError as e:
        logger.info('Requested short code is taken. Responding with 409.', extra={'event': SHORTCODE_CONFLICT})
        return response_409(message=str(e), error_code=SHORTCODE_CONFLICT)
    except ShortCodeGenerationError:
        logger.exception('Failed to generate a free short code. Responding with 500.', extra={'event': SHORTCODE_GENERATION_FAILED})
        return response_500(error_code=SHORTCODE_GENERATION_FAILED)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'event': DATA_STORE_UNAVAILABLE})
        return response_500(error_code=DATA_STORE_UNAVAILABLE)

    # 4- Return successful response to user
    short_url = get_short_url(url.short_code, event)
    logger.info(
        'Shortened URL. Responding with 201.',
        extra={'event': URL_SHORTENED, 'recordId': url.id, 'shortcode': url.short_code, 'userId': user_id},
    )
    return response_201({**url.to_dict(), 'shortUrl': short_url}, location=short_url)
