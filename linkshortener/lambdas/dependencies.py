"""Wire services to Redis-backed DAOs for a given lambda

All DAOs of one invocation share a single Redis client (and connection pool),
configured from the lambda's AppConfig section.
"""

from linkshortener.dao.redis import ShortCodeRedisDAO, UrlRecordRedisDAO, ClickRedisDAO
from linkshortener.services import ShortenerService, AnalyticsAggregator
from linkshortener.utils.config import app_prefix, redis_settings


def _redis_daos(lambda_name: str) -> tuple[ShortCodeRedisDAO, UrlRecordRedisDAO, ClickRedisDAO]:
    prefix = app_prefix()
    code_dao = ShortCodeRedisDAO(**redis_settings(lambda_name), prefix=prefix)
    url_dao = UrlRecordRedisDAO(redis_client=code_dao.redis, prefix=prefix, short_code_dao=code_dao)
    click_dao = ClickRedisDAO(redis_client=code_dao.redis, prefix=prefix)
    return code_dao, url_dao, click_dao


def build_shortener_service(lambda_name: str) -> ShortenerService:
    code_dao, url_dao, click_dao = _redis_daos(lambda_name)
    return ShortenerService(code_dao=code_dao, url_dao=url_dao, click_dao=click_dao)


def build_analytics_aggregator(lambda_name: str) -> AnalyticsAggregator:
    _, url_dao, click_dao = _redis_daos(lambda_name)
    return AnalyticsAggregator(url_dao=url_dao, click_dao=click_dao)
