import logging

from linkshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from linkshortener.exceptions import ForbiddenError
from linkshortener.dao.exceptions import DataStoreError, RecordNotFoundError
from linkshortener.utils import guarantee_500_response
from linkshortener.lambdas.events import path_parameter, requester_id
from linkshortener.lambdas.dependencies import build_analytics_aggregator
from linkshortener.lambdas.responses import response_200, response_400, response_401, response_403, response_404, response_500
from linkshortener.lambdas.analytics.constants import (
    MISSING_USER_ID,
    MISSING_URL_ID,
    URL_NOT_FOUND,
    FORBIDDEN,
    DATA_STORE_UNAVAILABLE,
    ROUTE_NOT_FOUND,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests for link analytics

    Routes:
        GET /analytics/dashboard    per-user dashboard (authentication required)
        GET /analytics/urls/{id}    30-day visit series of one URL record

    HTTP responses:
        200: UserDashboard / UrlAnalytics (see their to_dict())
        400: missing URL id in path
        401: missing Cognito user id for the dashboard
        403: caller is not the owner of the URL record
        404: URL record not found (or unknown route)
        500: data store unavailable
    """
    resource = (event.get('resource') or '').rstrip('/')
    user_id = requester_id(event)

    try:
        analytics = build_analytics_aggregator('analytics')

        if resource == '/analytics/dashboard':
            if user_id is None:
                logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
                return response_401(message="missing 'sub' in JWT claims", error_code=MISSING_USER_ID)

            dashboard = analytics.get_user_dashboard(user_id)
            logger.debug('Built dashboard.', extra={'userId': user_id, 'totalUrls': dashboard.summary.total_urls})
            return response_200(dashboard.to_dict())

        if resource.startswith('/analytics/urls'):
            url_id = path_parameter(event, 'id')
            if url_id is None:
                logger.info("Missing 'id' in path. Responding with 400.", extra={'event': MISSING_URL_ID})
                return response_400(message="missing 'id' in path", error_code=MISSING_URL_ID)

            return response_200(analytics.get_url_analytics(url_id, user_id).to_dict())
    except RecordNotFoundError as e:
        logger.info('URL record not found. Responding with 404.', extra={'event': URL_NOT_FOUND})
        return response_404(message=str(e), error_code=URL_NOT_FOUND)
    except ForbiddenError as e:
        logger.info('Caller does not own URL record. Responding with 403.', extra={'event': FORBIDDEN, 'userId': user_id})
        return response_403(message=str(e), error_code=FORBIDDEN)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'event': DATA_STORE_UNAVAILABLE})
        return response_500(error_code=DATA_STORE_UNAVAILABLE)

    logger.info('Unknown route. Responding with 404.', extra={'event': ROUTE_NOT_FOUND, 'resource': resource})
    return response_404(message=f'no route for {resource}', error_code=ROUTE_NOT_FOUND)
