import logging

from linkshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from linkshortener.dao.exceptions import DataStoreError, LinkExpiredError, RecordNotFoundError
from linkshortener.utils import get_short_url, guarantee_500_response
from linkshortener.lambdas.events import path_parameter
from linkshortener.lambdas.dependencies import build_shortener_service
from linkshortener.lambdas.responses import response_302, response_400, response_404, response_500
from linkshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    DATA_STORE_UNAVAILABLE,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs (GET /{shortcode})

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Resolve the shortcode and count the visit (via ShortenerService)
    - Step 3: Redirect client to original URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: original URL
        400: Bad client request
            message: missing shortcode in path parameters
        404: Not found
            message: shortcode not bound to any URL, or the link has expired
        500: Internal server error
            message: data store unavailable

    Args:
        event (dict):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71TCN'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Extract shortcode from request's path
    shortcode = path_parameter(event, 'shortcode')
    if shortcode is None:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    # 2- Resolve shortcode (click tracking failures never block the redirect)
    try:
        service = build_shortener_service('redirect_url')
        original_url = service.resolve(shortcode)
    except LinkExpiredError:
        logger.info('Short URL expired. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED})
        return response_404(message=f'short url {get_short_url(shortcode, event)} has expired', error_code=SHORT_URL_EXPIRED)
    except RecordNotFoundError:
        logger.info('Short URL not found. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_404(message=f"short url {get_short_url(shortcode, event)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'shortcode': shortcode, 'event': DATA_STORE_UNAVAILABLE})
        return response_500(error_code=DATA_STORE_UNAVAILABLE)

    # 3- Redirect client to original URL
    logger.info('Redirecting client to original URL. Responding with 302.', extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS})
    return response_302(location=original_url)
