"""Data Access Object (DAO) implementation for click tracking in Redis

Two kinds of counters are maintained per URL record:

    <prefix>:record:<id>                 hash field `clicks`: lifetime visit counter
    <prefix>:visits:<id>:<YYYY-MM-DD>    per-day visit counter (UTC), expires 30 days after the last visit

Every visit increments both counters and refreshes the record's `updated_at`
field in a single MULTI/EXEC transaction, so concurrent redirects never lose
an increment and the lifetime counter never lags behind the daily one:

    MULTI
    HEXISTS <prefix>:record:<id> data
    HINCRBY <prefix>:record:<id> clicks 1
    HSET    <prefix>:record:<id> updated_at <now>
    INCR    <prefix>:visits:<id>:<today>
    EXPIRE  <prefix>:visits:<id>:<today> 2592000
    EXEC

A visit racing with a delete finds no `data` field, removes the counters it
just created and reports the record as missing.

Classes:
    ClickRedisDAO:
        DAO for counting and reading URL record visits.

Example:
    >>> from linkshortener.dao.redis import ClickRedisDAO

    >>> dao = ClickRedisDAO(prefix="linkshortener:dev")
    >>> dao.record_visit('V1StGXR8_Z5jdHi6B-myT')
    13
    >>> dao.get_daily_counts('V1StGXR8_Z5jdHi6B-myT', days=2)
    [DailyCount(date=datetime.date(2026, 10, 18), clicks=4), DailyCount(date=datetime.date(2026, 10, 19), clicks=1)]
"""

import logging
from collections.abc import Iterable

import redis
from beartype import beartype

from linkshortener.models import DailyCount
from linkshortener.dao.base import ClickBaseDAO
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.redis.url_record_redis_dao import DATA_FIELD, CLICKS_FIELD, UPDATED_AT_FIELD
from linkshortener.dao.exceptions import DataStoreError, UrlRecordNotFoundError
from linkshortener.utils.helpers import utc_now, last_n_days
from linkshortener.utils.constants import ANALYTICS_WINDOW_DAYS, VISIT_RETENTION_SECONDS


logger = logging.getLogger(__name__)


class ClickRedisDAO(RedisClientMixin, ClickBaseDAO):
    """Redis-based click tracker

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        record_visit(record_id: str) -> int
        get_daily_counts(record_id: str, days: int = 30) -> list[DailyCount]
        get_daily_counts_many(record_ids: Iterable[str], days: int = 30) -> dict[str, list[DailyCount]]
    """

    @handle_redis_connection_error
    @beartype
    def record_visit(self, record_id: str, **kwargs) -> int:
        """Count one visit of a URL record

        The existence check runs inside the same MULTI/EXEC as the increments.
        When the record was deleted concurrently, the counters-only hash the
        increments leave behind is removed again. Record ids are never reused,
        so nothing else can own that key.

        Returns:
            int: lifetime click counter after the increment.

        Raises:
            UrlRecordNotFoundError:
                If the URL record does not exist.
            DataStoreError:
                If Redis connectivity issues occur or Redis rejects the transaction
                (e.g. OOM under a noeviction policy).
        """
        record_key = self.keys.record_key(record_id)
        now = utc_now()
        visits_key = self.keys.visits_key(record_id, now.date())

        try:
            with self.redis.pipeline(transaction=True) as pipe:
                pipe.hexists(record_key, DATA_FIELD)
                pipe.hincrby(record_key, CLICKS_FIELD, 1)
                pipe.hset(record_key, UPDATED_AT_FIELD, now.isoformat())
                pipe.incr(visits_key)
                pipe.expire(visits_key, VISIT_RETENTION_SECONDS)
                exists, clicks, *_ = pipe.execute()

            if not exists:
                self.redis.delete(record_key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
            raise
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f"Failed to record visit of URL record '{record_id}': {e}") from e

        if not exists:
            logger.info('Discarded visit of a deleted URL record.', extra={'recordId': record_id})
            raise UrlRecordNotFoundError(f"URL record '{record_id}' not found.")
        return int(clicks)

    @handle_redis_connection_error
    @beartype
    def get_daily_counts(self, record_id: str, days: int = ANALYTICS_WINDOW_DAYS, **kwargs) -> list[DailyCount]:
        """Per-day visit counts of one URL record over the last `days` days

        Returns:
            list[DailyCount]: exactly `days` entries, oldest first, ending today (UTC).
                Days without visits (or whose bucket has expired) count as 0.

        Raises:
            ValueError:
                If days is negative.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        return self.get_daily_counts_many([record_id], days=days)[record_id]

    @handle_redis_connection_error
    @beartype
    def get_daily_counts_many(
        self,
        record_ids: Iterable[str],
        days: int = ANALYTICS_WINDOW_DAYS,
        **kwargs,
    ) -> dict[str, list[DailyCount]]:
        """Per-day visit counts of several URL records, fetched in one pipeline

        Returns:
            dict[str, list[DailyCount]]: record id -> zero-filled daily series.
        """
        dates = last_n_days(days)
        record_ids = list(dict.fromkeys(record_ids))
        if not record_ids or not dates:
            return {record_id: [] for record_id in record_ids}

        with self.redis.pipeline(transaction=False) as pipe:
            for record_id in record_ids:
                for day in dates:
                    pipe.get(self.keys.visits_key(record_id, day))
            results = pipe.execute()

        series = {}
        for i, record_id in enumerate(record_ids):
            counts = results[i * len(dates):(i + 1) * len(dates)]
            series[record_id] = [DailyCount(date=day, clicks=int(count or 0)) for day, count in zip(dates, counts)]
        return series
