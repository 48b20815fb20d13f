"""Data Access Object (DAO) implementation of the short code registry in Redis

Every short code is stored as a plain string key holding the id of the URL
record it resolves to:

    <prefix>:code:<short code> -> <record id>

Responsibilities:
    - Allocate requested or randomly generated short codes;
    - Bind codes atomically (SET NX) so concurrent requests for the same code
      produce exactly one winner;
    - Move bindings when a record's code changes;
    - Resolve codes on every redirect with a single GET.

Classes:
    ShortCodeRedisDAO:
        DAO for the short code -> URL record id lookup table in Redis.

Example:
    >>> from linkshortener.dao.redis import ShortCodeRedisDAO

    >>> dao = ShortCodeRedisDAO(prefix="linkshortener:dev")
    >>> code = dao.allocate('my-link')
    >>> dao.register(code, 'V1StGXR8_Z5jdHi6B-myT')
    <ShortCodeRedisDAO>
    >>> dao.resolve('my-link')
    'V1StGXR8_Z5jdHi6B-myT'
"""

import logging

from beartype import beartype

from linkshortener.dao.base import ShortCodeBaseDAO
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.exceptions import (
    ShortCodeAlreadyExistsError,
    ShortCodeGenerationError,
    ShortCodeNotFoundError,
)
from linkshortener.utils.shortener import generate_shortcode
from linkshortener.utils.constants import MAX_SHORTCODE_ATTEMPTS


logger = logging.getLogger(__name__)


class ShortCodeRedisDAO(RedisClientMixin, ShortCodeBaseDAO):
    """Redis-based short code registry

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        allocate(requested_code: str | None = None) -> str
        register(short_code: str, record_id: str) -> ShortCodeRedisDAO
        rebind(old_code: str, new_code: str, record_id: str) -> ShortCodeRedisDAO
        resolve(short_code: str) -> str
        unbind(short_code: str) -> ShortCodeRedisDAO
        exists(short_code: str) -> bool
    """

    @handle_redis_connection_error
    @beartype
    def allocate(self, requested_code: str | None = None, **kwargs) -> str:
        """Return a short code which is not bound at the moment of the call

        A requested (custom) code is returned as-is when free. Otherwise a random
        7-character code is generated and regenerated on collision, at most
        MAX_SHORTCODE_ATTEMPTS times.

        NOTE: This is a best-effort pre-check. Another request may bind the same
              code between allocate() and register(); register() rejects the loser.

        Args:
            requested_code (str | None):
                Custom code requested by the caller.

        Returns:
            str: A short code free for registration.

        Raises:
            ShortCodeAlreadyExistsError:
                If the requested code is already bound.
            ShortCodeGenerationError:
                If every generated candidate collided with a bound code.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.allocate()
            'Xb3_k9Q'
            >>> dao.allocate('my-link')
            'my-link'
        """
        if requested_code is not None:
            if self.exists(requested_code):
                raise ShortCodeAlreadyExistsError(f"Short code '{requested_code}' already exists.")
            return requested_code

        for attempt in range(1, MAX_SHORTCODE_ATTEMPTS + 1):
            candidate = generate_shortcode()
            if not self.exists(candidate):
                return candidate
            logger.info('Generated short code collided with an existing one.', extra={'shortcode': candidate, 'attempt': attempt})

        raise ShortCodeGenerationError(f'Failed to generate a free short code after {MAX_SHORTCODE_ATTEMPTS} attempts.')

    @handle_redis_connection_error
    @beartype
    def register(self, short_code: str, record_id: str, **kwargs) -> 'ShortCodeRedisDAO':
        """Bind a short code to a URL record id

        The binding is written with SET NX, which makes registration the single
        atomic chokepoint for code uniqueness:

            (request 1): allocate('my-link') -> free
            (request 2): allocate('my-link') -> free
            (request 1): SET <app>:code:my-link <id 1> NX  => OK
            (request 2): SET <app>:code:my-link <id 2> NX  => nil -> ShortCodeAlreadyExistsError

        Raises:
            ShortCodeAlreadyExistsError:
                If the short code is already bound.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        if not self.redis.set(self.keys.code_key(short_code), record_id, nx=True):
            raise ShortCodeAlreadyExistsError(f"Short code '{short_code}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def rebind(self, old_code: str, new_code: str, record_id: str, **kwargs) -> 'ShortCodeRedisDAO':
        """Move a URL record's binding from old_code to new_code

        The new binding is installed first (SET NX) and the old one removed
        afterwards, so the record stays resolvable throughout. A new code already
        bound to the same record is accepted (e.g. a retried update).

        Raises:
            ShortCodeAlreadyExistsError:
                If new_code is bound to a different record. Nothing is written.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.rebind('my-link', 'my-new-link', 'V1StGXR8_Z5jdHi6B-myT')
            <ShortCodeRedisDAO>
        """
        if old_code == new_code:
            return self

        new_code_key = self.keys.code_key(new_code)
        if not self.redis.set(new_code_key, record_id, nx=True):
            if self.redis.get(new_code_key) != record_id:
                raise ShortCodeAlreadyExistsError(f"Short code '{new_code}' already exists.")

        self.redis.delete(self.keys.code_key(old_code))
        return self

    @handle_redis_connection_error
    @beartype
    def resolve(self, short_code: str, **kwargs) -> str:
        """Return the URL record id bound to a short code

        Raises:
            ShortCodeNotFoundError:
                If the short code is not bound.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        record_id = self.redis.get(self.keys.code_key(short_code))
        if record_id is None:
            raise ShortCodeNotFoundError(f"Short code '{short_code}' not found.")
        return record_id

    @handle_redis_connection_error
    @beartype
    def unbind(self, short_code: str, **kwargs) -> 'ShortCodeRedisDAO':
        self.redis.delete(self.keys.code_key(short_code))
        return self

    @handle_redis_connection_error
    @beartype
    def exists(self, short_code: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.code_key(short_code)))
