import functools
from collections.abc import Callable
from datetime import date

from linkshortener.utils.helpers import utc_now


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing data models.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "linkshortener:prod" or "linkshortener:dev".

    Keys:
        record:<id>               hash   -> data (JSON), clicks (int), updated_at (ISO-8601)
        code:<short code>         string -> record id
        owner:<owner id>          hash   -> record id => short code
        visits:<id>:<YYYY-MM-DD>  string -> daily visit counter (sliding TTL)
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def record_key(self, record_id: str) -> str:
        return f'record:{record_id}'

    @prefix_key
    def code_key(self, short_code: str) -> str:
        return f'code:{short_code}'

    @prefix_key
    def owner_key(self, owner_id: str) -> str:
        return f'owner:{owner_id}'

    @prefix_key
    def visits_key(self, record_id: str, day: date | None = None) -> str:
        day = day or utc_now().date()
        return f'visits:{record_id}:{day.isoformat()}'
