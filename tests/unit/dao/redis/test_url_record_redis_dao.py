"""Unit tests for the UrlRecordRedisDAO

Test coverage includes:

1. Creation
   - Binds the short code before writing the record hash and owner index entry.
   - A taken short code aborts creation with nothing persisted.
   - A failed record write releases the short code binding again.

2. Retrieval
   - Rebuilds UrlRecordModel from the record hash, merging the click counter.
   - Missing records (or counters-only hashes) raise UrlRecordNotFoundError.
   - Short codes are resolved through the registry.

3. Listing
   - Lists an owner's records newest first with offset/limit.
   - Skips owner index entries whose record is gone.

4. Updates
   - Applies title/description patches and refreshes updated_at.
   - Moves the short code binding and owner index entry on code changes.
   - Rejects non-owners and taken codes without writing anything.
   - A record deleted mid-update stays deleted and its new code is released.

5. Deletion
   - Removes record, code binding and owner index entry.
   - Cleanup failures are logged, never raised.
"""

import dataclasses
from datetime import datetime, UTC
from unittest.mock import call, patch

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation
from freezegun import freeze_time

from linkshortener.models import UrlRecordModel, UrlRecordPatch
from linkshortener.exceptions import ForbiddenError
from linkshortener.dao.redis import UrlRecordRedisDAO
from linkshortener.dao.redis.url_record_redis_dao import serialize_record, deserialize_record
from linkshortener.dao.exceptions import (
    DataStoreError,
    ShortCodeAlreadyExistsError,
    ShortCodeNotFoundError,
    UrlRecordNotFoundError,
)


RECORD_KEY = 'testapp:test:record:V1StGXR8_Z5jdHi6B-myT'
OWNER_KEY = 'testapp:test:owner:user-1'


# -------------------------------
# Fixtures
# -------------------------------


def stored(url: UrlRecordModel) -> dict:
    """Record hash as returned by HGETALL with decode_responses=True."""
    return {
        'data': serialize_record(url),
        'clicks': str(url.clicks),
        'updated_at': url.updated_at.isoformat(),
    }


@pytest.fixture
def dao(redis_client, app_prefix):
    """Create a UrlRecordRedisDAO instance with a mocked Redis client."""
    return UrlRecordRedisDAO(redis_client=redis_client, prefix=app_prefix)


# -------------------------------
# 1. Creation
# -------------------------------


@freeze_time('2025-10-15 12:00:00')
def test_create(dao, redis_client):
    """Ensure code is bound first, then record and owner index are written atomically."""
    redis_client.set.return_value = True

    with patch('linkshortener.dao.redis.url_record_redis_dao.generate_record_id', return_value='V1StGXR8_Z5jdHi6B-myT'):
        url = dao.create('https://example.com/blog/article-123', 'my-article', owner_id='user-1', title='My article')

    now = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)
    assert url == UrlRecordModel(
        id='V1StGXR8_Z5jdHi6B-myT',
        original_url='https://example.com/blog/article-123',
        short_code='my-article',
        owner_id='user-1',
        title='My article',
        clicks=0,
        created_at=now,
        updated_at=now,
    )

    redis_client.set.assert_called_once_with('testapp:test:code:my-article', 'V1StGXR8_Z5jdHi6B-myT', nx=True)
    redis_client.pipeline.assert_called_once_with(transaction=True)
    redis_client.hset.assert_has_calls(
        [
            call(RECORD_KEY, mapping={'data': serialize_record(url), 'clicks': 0, 'updated_at': now.isoformat()}),
            call(OWNER_KEY, 'V1StGXR8_Z5jdHi6B-myT', 'my-article'),
        ]
    )
    redis_client.execute.assert_called_once()


def test_create_anonymous_skips_owner_index(dao, redis_client):
    redis_client.set.return_value = True

    url = dao.create('https://example.com/anonymous', 'anon-link')

    assert url.owner_id is None
    assert redis_client.hset.call_count == 1


def test_create_with_taken_code(dao, redis_client):
    """Ensure a conflict persists nothing."""
    redis_client.set.return_value = None

    with pytest.raises(ShortCodeAlreadyExistsError):
        dao.create('https://example.com/page', 'taken', owner_id='user-1')

    redis_client.hset.assert_not_called()
    redis_client.execute.assert_not_called()


def test_create_releases_code_when_record_write_fails(dao, redis_client):
    redis_client.set.return_value = True
    redis_client.execute.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0."):
        dao.create('https://example.com/page', 'my-link', owner_id='user-1')

    redis_client.delete.assert_called_once_with('testapp:test:code:my-link')


def test_create_with_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.create('https://example.com/page', 'my-link', expires_at='tomorrow')


# -------------------------------
# 2. Retrieval
# -------------------------------


def test_get_by_id(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    assert dao.get_by_id(url_record.id) == url_record
    redis_client.hgetall.assert_called_once_with(RECORD_KEY)


def test_get_by_id_merges_click_counter(dao, redis_client, url_record):
    fields = stored(url_record)
    fields['clicks'] = '42'
    redis_client.hgetall.return_value = fields

    assert dao.get_by_id(url_record.id).clicks == 42


@pytest.mark.parametrize('fields', [{}, {'clicks': '3', 'updated_at': '2025-10-15T00:00:00+00:00'}])
def test_get_by_id_missing(dao, redis_client, fields):
    redis_client.hgetall.return_value = fields

    with pytest.raises(UrlRecordNotFoundError):
        dao.get_by_id('missing')


def test_get_by_code(dao, redis_client, url_record):
    redis_client.get.return_value = url_record.id
    redis_client.hgetall.return_value = stored(url_record)

    assert dao.get_by_code('my-article') == url_record
    redis_client.get.assert_called_once_with('testapp:test:code:my-article')


def test_get_by_unbound_code(dao, redis_client):
    with pytest.raises(ShortCodeNotFoundError):
        dao.get_by_code('missing')
    redis_client.hgetall.assert_not_called()


def test_get_by_code_with_dangling_binding(dao, redis_client):
    redis_client.get.return_value = 'deleted-record'

    with pytest.raises(UrlRecordNotFoundError):
        dao.get_by_code('my-article')


def test_deserialize_record_round_trip(url_record):
    assert deserialize_record(stored(url_record)) == url_record


# -------------------------------
# 3. Listing
# -------------------------------


def _records(url_record: UrlRecordModel, count: int) -> list[UrlRecordModel]:
    return [
        dataclasses.replace(
            url_record,
            id=f'rec{i}',
            short_code=f'code{i}',
            created_at=datetime(2025, 10, i + 1, tzinfo=UTC),
            updated_at=datetime(2025, 10, i + 1, tzinfo=UTC),
        )
        for i in range(count)
    ]


def test_list_by_owner(dao, redis_client, url_record):
    """Ensure records come back newest first."""
    urls = _records(url_record, 3)
    redis_client.hgetall.return_value = {url.id: url.short_code for url in urls}
    redis_client.execute.return_value = [stored(url) for url in urls]

    result = dao.list_by_owner('user-1')

    assert [url.id for url in result] == ['rec2', 'rec1', 'rec0']
    redis_client.pipeline.assert_called_once_with(transaction=False)
    redis_client.hgetall.assert_has_calls([call(OWNER_KEY), call('testapp:test:record:rec0')])


def test_list_by_owner_with_offset_and_limit(dao, redis_client, url_record):
    urls = _records(url_record, 5)
    redis_client.hgetall.return_value = {url.id: url.short_code for url in urls}
    redis_client.execute.return_value = [stored(url) for url in urls]

    assert [url.id for url in dao.list_by_owner('user-1', limit=2, offset=1)] == ['rec3', 'rec2']
    assert [url.id for url in dao.list_by_owner('user-1', limit=None, offset=3)] == ['rec1', 'rec0']
    assert dao.list_by_owner('user-1', limit=2, offset=10) == []


def test_list_by_owner_skips_dangling_entries(dao, redis_client, url_record):
    urls = _records(url_record, 2)
    redis_client.hgetall.return_value = {'rec0': 'code0', 'gone': 'code9', 'rec1': 'code1'}
    redis_client.execute.return_value = [stored(urls[0]), {}, stored(urls[1])]

    assert [url.id for url in dao.list_by_owner('user-1')] == ['rec1', 'rec0']


def test_list_by_owner_without_urls(dao, redis_client):
    assert dao.list_by_owner('user-1') == []
    redis_client.pipeline.assert_not_called()


@pytest.mark.parametrize('limit, offset', [(-1, 0), (10, -1)])
def test_list_by_owner_with_negative_page(dao, limit, offset):
    with pytest.raises(ValueError):
        dao.list_by_owner('user-1', limit=limit, offset=offset)


# -------------------------------
# 4. Updates
# -------------------------------


@freeze_time('2025-10-15 12:00:00')
def test_update_title(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    url = dao.update(url_record.id, 'user-1', UrlRecordPatch(title='Renamed'))

    now = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)
    assert url.title == 'Renamed'
    assert url.short_code == url_record.short_code
    assert url.clicks == url_record.clicks
    assert url.updated_at == now
    redis_client.set.assert_not_called()
    redis_client.hset.assert_called_once_with(RECORD_KEY, mapping={'data': serialize_record(url), 'updated_at': now.isoformat()})


def test_update_short_code(dao, redis_client, url_record):
    """Ensure the code binding and owner index entry follow the new code."""
    redis_client.hgetall.return_value = stored(url_record)
    redis_client.set.return_value = True

    url = dao.update(url_record.id, 'user-1', UrlRecordPatch(short_code='new-code'))

    assert url.short_code == 'new-code'
    redis_client.set.assert_called_once_with('testapp:test:code:new-code', url_record.id, nx=True)
    redis_client.delete.assert_called_once_with('testapp:test:code:my-article')
    redis_client.hset.assert_any_call(OWNER_KEY, url_record.id, 'new-code')


def test_update_by_non_owner(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    with pytest.raises(ForbiddenError):
        dao.update(url_record.id, 'user-2', UrlRecordPatch(title='Hijacked'))
    redis_client.hset.assert_not_called()


def test_update_without_requester_skips_ownership_check(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    assert dao.update(url_record.id, None, UrlRecordPatch(description='About')).description == 'About'


def test_update_to_taken_code(dao, redis_client, url_record):
    """Ensure a conflict leaves the record untouched."""
    redis_client.hgetall.return_value = stored(url_record)
    redis_client.set.return_value = None
    redis_client.get.return_value = 'other-record'

    with pytest.raises(ShortCodeAlreadyExistsError):
        dao.update(url_record.id, 'user-1', UrlRecordPatch(short_code='taken'))
    redis_client.hset.assert_not_called()
    redis_client.delete.assert_not_called()


def test_update_restores_code_binding_when_record_write_fails(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)
    redis_client.set.return_value = True
    redis_client.transaction.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError):
        dao.update(url_record.id, 'user-1', UrlRecordPatch(short_code='new-code'))

    redis_client.set.assert_has_calls(
        [
            call('testapp:test:code:new-code', url_record.id, nx=True),
            call('testapp:test:code:my-article', url_record.id, nx=True),
        ]
    )
    redis_client.delete.assert_has_calls([call('testapp:test:code:my-article'), call('testapp:test:code:new-code')])


def test_update_watches_record(dao, redis_client, url_record):
    """Ensure the body is only written inside a transaction watching the record."""
    redis_client.hgetall.return_value = stored(url_record)

    dao.update(url_record.id, 'user-1', UrlRecordPatch(title='Renamed'))

    redis_client.transaction.assert_called_once()
    assert redis_client.transaction.call_args.args[1] == RECORD_KEY
    redis_client.hexists.assert_called_once_with(RECORD_KEY, 'data')
    redis_client.multi.assert_called_once()


def test_update_record_deleted_concurrently(dao, redis_client, url_record):
    """Ensure a delete landing mid-update is not undone by the update."""
    redis_client.hgetall.return_value = stored(url_record)
    redis_client.set.return_value = True
    redis_client.hexists.return_value = False

    with pytest.raises(UrlRecordNotFoundError):
        dao.update(url_record.id, 'user-1', UrlRecordPatch(short_code='new-code', title='Renamed'))

    redis_client.hset.assert_not_called()
    redis_client.set.assert_called_once_with('testapp:test:code:new-code', url_record.id, nx=True)
    redis_client.delete.assert_has_calls([call('testapp:test:code:my-article'), call('testapp:test:code:new-code')])


def test_update_missing_record(dao):
    with pytest.raises(UrlRecordNotFoundError):
        dao.update('missing', 'user-1', UrlRecordPatch(title='Nope'))


# -------------------------------
# 5. Deletion
# -------------------------------


def test_delete(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    dao.delete(url_record.id, 'user-1')

    redis_client.delete.assert_has_calls([call(RECORD_KEY), call('testapp:test:code:my-article')])
    redis_client.hdel.assert_called_once_with(OWNER_KEY, url_record.id)


def test_delete_by_non_owner(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(url_record)

    with pytest.raises(ForbiddenError):
        dao.delete(url_record.id, 'user-2')
    redis_client.delete.assert_not_called()


def test_delete_anonymous_record_with_requester(dao, redis_client, url_record):
    redis_client.hgetall.return_value = stored(dataclasses.replace(url_record, owner_id=None))

    with pytest.raises(ForbiddenError):
        dao.delete(url_record.id, 'user-1')


def test_delete_missing_record(dao):
    with pytest.raises(UrlRecordNotFoundError):
        dao.delete('missing', 'user-1')


def test_delete_is_best_effort(dao, redis_client, url_record, caplog):
    """Ensure every cleanup step is attempted and failures are only logged."""
    redis_client.hgetall.return_value = stored(url_record)
    redis_client.delete.side_effect = redis.exceptions.ConnectionError('Connection error')

    dao.delete(url_record.id, 'user-1')

    assert redis_client.delete.call_count == 2
    redis_client.hdel.assert_called_once_with(OWNER_KEY, url_record.id)
    assert sum('Failed to' in record.getMessage() for record in caplog.records) == 2
