from linkshortener.dao.redis.redis_key_schema import RedisKeySchema
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.short_code_redis_dao import ShortCodeRedisDAO
from linkshortener.dao.redis.url_record_redis_dao import UrlRecordRedisDAO
from linkshortener.dao.redis.click_redis_dao import ClickRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortCodeRedisDAO',
    'UrlRecordRedisDAO',
    'ClickRedisDAO',
]
