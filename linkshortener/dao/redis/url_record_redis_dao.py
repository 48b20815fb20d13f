"""Data Access Object (DAO) implementation for managing URL records in Redis

Each URL record is a Redis hash. The record body is an opaque JSON blob, while
the lifetime click counter and the last-update moment live in their own hash
fields so that redirects can update them atomically (HINCRBY / HSET) without
rewriting the body:

    <prefix>:record:<id>        -> {data: <JSON>, clicks: <int>, updated_at: <ISO-8601>}
    <prefix>:code:<short code>  -> <id>                    (see ShortCodeRedisDAO)
    <prefix>:owner:<owner id>   -> {<id>: <short code>, ...}

Responsibilities:
    - Create records, binding the short code before the record is written;
    - Retrieve records by id or by short code;
    - List an owner's records through the owner index;
    - Update records, moving code bindings and owner index entries along;
    - Delete records with best-effort cleanup of the code binding and owner index;
    - Enforce ownership on update and delete.

Classes:
    UrlRecordRedisDAO:
        DAO for storing and retrieving UrlRecordModel in a Redis datastore.

Example:
    >>> from linkshortener.dao.redis import UrlRecordRedisDAO

    >>> dao = UrlRecordRedisDAO(prefix="linkshortener:dev")
    >>> url = dao.create('https://example.com/page', 'my-link', owner_id='user-1')
    >>> dao.get_by_code('my-link').id == url.id
    True
    >>> dao.update(url.id, 'user-1', UrlRecordPatch(short_code='my-page')).short_code
    'my-page'
    >>> dao.delete(url.id, 'user-1')
"""

import json
import logging
import dataclasses
from datetime import datetime
from typing import Any, Optional
from collections.abc import Callable

import redis
from beartype import beartype

from linkshortener.models import UrlRecordModel, UrlRecordPatch
from linkshortener.exceptions import ForbiddenError
from linkshortener.dao.base import ShortCodeBaseDAO, UrlRecordBaseDAO
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.short_code_redis_dao import ShortCodeRedisDAO
from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.exceptions import DAOError, UrlRecordNotFoundError
from linkshortener.utils.helpers import utc_now
from linkshortener.utils.shortener import generate_record_id


logger = logging.getLogger(__name__)

# Record hash fields
DATA_FIELD = 'data'
CLICKS_FIELD = 'clicks'
UPDATED_AT_FIELD = 'updated_at'


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def serialize_record(url: UrlRecordModel) -> str:
    """Encode the immutable-per-write part of a record as a JSON blob"""
    body = {
        'id': url.id,
        'original_url': url.original_url,
        'short_code': url.short_code,
        'owner_id': url.owner_id,
        'title': url.title,
        'description': url.description,
        'created_at': url.created_at.isoformat() if url.created_at else None,
        'expires_at': url.expires_at.isoformat() if url.expires_at else None,
    }
    return json.dumps(body, separators=(',', ':'), ensure_ascii=False)


def deserialize_record(fields: dict[str, Any]) -> Optional[UrlRecordModel]:
    """Rebuild a UrlRecordModel from a record hash

    Returns None when the hash carries no record body, e.g. the key does not
    exist or only counters were left behind by a visit racing with a delete.
    """
    blob = fields.get(DATA_FIELD) if fields else None
    if blob is None:
        return None

    body = json.loads(blob)
    created_at = _parse_datetime(body.get('created_at'))
    return UrlRecordModel(
        id=body['id'],
        original_url=body['original_url'],
        short_code=body['short_code'],
        owner_id=body.get('owner_id'),
        title=body.get('title'),
        description=body.get('description'),
        clicks=int(fields.get(CLICKS_FIELD) or 0),
        created_at=created_at,
        updated_at=_parse_datetime(fields.get(UPDATED_AT_FIELD)) or created_at,
        expires_at=_parse_datetime(body.get('expires_at')),
    )


class UrlRecordRedisDAO(RedisClientMixin, UrlRecordBaseDAO):
    """Redis-based Data Access Object (DAO) for URL records

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
        codes (ShortCodeBaseDAO):
            Short code registry sharing the same Redis client.

    Methods:
        create(original_url, short_code, owner_id=None, title=None, description=None, expires_at=None) -> UrlRecordModel
        get_by_id(record_id: str) -> UrlRecordModel
        get_by_code(short_code: str) -> UrlRecordModel
        list_by_owner(owner_id: str, limit: int | None = 50, offset: int = 0) -> list[UrlRecordModel]
        update(record_id: str, requester_id: str | None, patch: UrlRecordPatch) -> UrlRecordModel
        delete(record_id: str, requester_id: str | None = None) -> None

    NOTE:
        - Writes spanning the code binding and the record are NOT one transaction.
          The code is bound before the record is written and unbound after the
          record is removed, so a code never resolves to a removed record for
          longer than the gap between two Redis round trips.
        - delete() cleanup policy: each of the three removals is attempted even
          if a previous one failed; failures are logged and never raised.
    """

    def __init__(self, *args, short_code_dao: Optional[ShortCodeBaseDAO] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.codes = short_code_dao or ShortCodeRedisDAO(redis_client=self.redis, prefix=self.keys.prefix)

    @handle_redis_connection_error
    @beartype
    def create(
        self,
        original_url: str,
        short_code: str,
        owner_id: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        **kwargs,
    ) -> UrlRecordModel:
        """Persist a new URL record

        Steps:
            1. Bind the short code to a fresh record id (SET NX). A conflict
               aborts the creation before anything else is written.
            2. Write the record hash and, for owned records, the owner index
               entry in one MULTI/EXEC transaction.
            3. If step 2 fails, unbind the code again and re-raise.

        Returns:
            UrlRecordModel: the newly created record.

        Raises:
            ShortCodeAlreadyExistsError:
                If the short code is already bound. No record is persisted.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.create('https://example.com/a', 'Xb3_k9Q')
            UrlRecordModel(id='V1StGXR8_Z5jdHi6B-myT', original_url='https://example.com/a', short_code='Xb3_k9Q', ...)
        """
        now = utc_now()
        url = UrlRecordModel(
            id=generate_record_id(),
            original_url=original_url,
            short_code=short_code,
            owner_id=owner_id,
            title=title,
            description=description,
            clicks=0,
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
        )

        self.codes.register(short_code, url.id)

        try:
            with self.redis.pipeline(transaction=True) as pipe:
                # fmt: off
                pipe.hset(self.keys.record_key(url.id), mapping={
                    DATA_FIELD: serialize_record(url),
                    CLICKS_FIELD: 0,
                    UPDATED_AT_FIELD: now.isoformat(),
                })
                # fmt: on
                if owner_id is not None:
                    pipe.hset(self.keys.owner_key(owner_id), url.id, short_code)
                pipe.execute()
        except redis.exceptions.RedisError:
            logger.warning(
                'Failed to write URL record. Releasing its short code.',
                extra={'recordId': url.id, 'shortcode': short_code},
            )
            self._attempt('release short code binding', url, lambda: self.codes.unbind(short_code))
            raise

        logger.debug('Created URL record.', extra={'recordId': url.id, 'shortcode': short_code, 'ownerId': owner_id})
        return url

    @handle_redis_connection_error
    @beartype
    def get_by_id(self, record_id: str, **kwargs) -> UrlRecordModel:
        """Retrieve a URL record (with its current click counter) by id

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        url = deserialize_record(self.redis.hgetall(self.keys.record_key(record_id)))
        if url is None:
            raise UrlRecordNotFoundError(f"URL record '{record_id}' not found.")
        return url

    @handle_redis_connection_error
    @beartype
    def get_by_code(self, short_code: str, **kwargs) -> UrlRecordModel:
        """Retrieve a URL record by its short code

        NOTE: A delete racing with this lookup can leave the code resolving to a
              record which is already gone. That case surfaces as UrlRecordNotFoundError.

        Raises:
            ShortCodeNotFoundError:
                If the short code is not bound.
            UrlRecordNotFoundError:
                If the code is bound to a record which no longer exists.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        record_id = self.codes.resolve(short_code)
        return self.get_by_id(record_id)

    @handle_redis_connection_error
    @beartype
    def list_by_owner(self, owner_id: str, limit: Optional[int] = 50, offset: int = 0, **kwargs) -> list[UrlRecordModel]:
        """List an owner's URL records, most recently created first

        All indexed records are fetched in one pipeline, ordered by creation
        time and then sliced, so pages are consistent with each other as long as
        the owner's URL set does not change between calls.

        Args:
            owner_id (str):
                Owner whose records are listed.
            limit (Optional[int]):
                Maximum number of records. None returns all records. Defaults to 50.
            offset (int):
                Number of records to skip. Defaults to 0.

        Returns:
            list[UrlRecordModel]: records ordered by created_at descending.

        Raises:
            ValueError:
                If limit or offset is negative.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        if offset < 0 or (limit is not None and limit < 0):
            raise ValueError(f'Limit and offset must be non-negative (given values: limit={limit}, offset={offset}).')

        index = self.redis.hgetall(self.keys.owner_key(owner_id))
        if not index:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for record_id in index:
                pipe.hgetall(self.keys.record_key(record_id))
            results = pipe.execute()

        # Entries left dangling by a partially failed delete are skipped
        urls = [url for url in map(deserialize_record, results) if url is not None]
        urls.sort(key=lambda url: url.created_at, reverse=True)

        end = None if limit is None else offset + limit
        return urls[offset:end]

    @handle_redis_connection_error
    @beartype
    def update(self, record_id: str, requester_id: Optional[str], patch: UrlRecordPatch, **kwargs) -> UrlRecordModel:
        """Apply a patch (short code, title, description) to a URL record

        Order of writes when the short code changes:
            1. Rebind the code in the registry (conflict aborts with nothing written);
            2. WATCH the record, check its body still exists, then write the new
               body and the owner index entry in one MULTI/EXEC transaction.
               If the write fails, the code binding is moved back. If the record
               was deleted in the meantime, the new binding is released and
               nothing is written.

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.
            ForbiddenError:
                If requester_id is given and is not the record's owner.
            ShortCodeAlreadyExistsError:
                If the new short code is bound to another record.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        url = self.get_by_id(record_id)
        self._check_ownership(url, requester_id, action='update')

        old_code = url.short_code
        new_code = patch.short_code if patch.short_code is not None else old_code
        code_changed = new_code != old_code

        updated = dataclasses.replace(
            url,
            short_code=new_code,
            title=patch.title if patch.title is not None else url.title,
            description=patch.description if patch.description is not None else url.description,
            updated_at=max(utc_now(), url.created_at) if url.created_at else utc_now(),
        )

        if code_changed:
            self.codes.rebind(old_code, new_code, url.id)

        record_key = self.keys.record_key(url.id)

        def write(pipe: redis.client.Pipeline) -> None:
            # WATCHed: a delete landing before EXEC aborts and re-runs this check
            if not pipe.hexists(record_key, DATA_FIELD):
                raise UrlRecordNotFoundError(f"URL record '{url.id}' not found.")
            pipe.multi()
            # fmt: off
            pipe.hset(record_key, mapping={
                DATA_FIELD: serialize_record(updated),
                UPDATED_AT_FIELD: updated.updated_at.isoformat(),
            })
            # fmt: on
            if code_changed and url.owner_id is not None:
                pipe.hset(self.keys.owner_key(url.owner_id), url.id, new_code)

        try:
            self.redis.transaction(write, record_key)
        except UrlRecordNotFoundError:
            if code_changed:
                logger.info(
                    'URL record was deleted during update. Releasing its new short code.',
                    extra={'recordId': url.id, 'shortcode': new_code},
                )
                self._attempt('release short code binding', updated, lambda: self.codes.unbind(new_code))
            raise
        except redis.exceptions.RedisError:
            if code_changed:
                logger.warning(
                    'Failed to write updated URL record. Restoring previous short code binding.',
                    extra={'recordId': url.id, 'shortcode': old_code, 'newShortcode': new_code},
                )
                self._attempt('restore short code binding', url, lambda: self.codes.rebind(new_code, old_code, url.id))
            raise

        logger.debug('Updated URL record.', extra={'recordId': url.id, 'shortcode': new_code, 'codeChanged': code_changed})
        return updated

    @handle_redis_connection_error
    @beartype
    def delete(self, record_id: str, requester_id: Optional[str] = None, **kwargs) -> None:
        """Delete a URL record, its short code binding and its owner index entry

        Removal order: record first, then the code binding, then the owner index
        entry. Each removal is attempted even if a previous one failed; failures
        are logged as warnings and not raised. A dangling owner index entry is
        skipped by list_by_owner(), a dangling code binding resolves to
        UrlRecordNotFoundError.

        Raises:
            UrlRecordNotFoundError:
                If the record does not exist.
            ForbiddenError:
                If requester_id is given and is not the record's owner.
            DataStoreError:
                If Redis connectivity issues occur while reading the record.
        """
        url = self.get_by_id(record_id)
        self._check_ownership(url, requester_id, action='delete')

        self._attempt('remove record', url, lambda: self.redis.delete(self.keys.record_key(url.id)))
        self._attempt('remove short code binding', url, lambda: self.codes.unbind(url.short_code))
        if url.owner_id is not None:
            self._attempt('remove owner index entry', url, lambda: self.redis.hdel(self.keys.owner_key(url.owner_id), url.id))

        logger.debug('Deleted URL record.', extra={'recordId': url.id, 'shortcode': url.short_code})

    @staticmethod
    def _check_ownership(url: UrlRecordModel, requester_id: Optional[str], action: str) -> None:
        if requester_id is not None and url.owner_id != requester_id:
            raise ForbiddenError(f"Not authorized to {action} URL record '{url.id}'.")

    @staticmethod
    def _attempt(step: str, url: UrlRecordModel, operation: Callable[[], Any]) -> bool:
        """Run a non-critical cleanup step, logging instead of raising on store failures"""
        try:
            operation()
        except (redis.exceptions.RedisError, DAOError) as e:
            logger.warning(
                'Failed to %s for URL record.',
                step,
                extra={'recordId': url.id, 'shortcode': url.short_code, 'reason': str(e), 'error': e.__class__.__name__},
            )
            return False
        return True
