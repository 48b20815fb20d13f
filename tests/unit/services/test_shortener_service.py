"""Unit tests for the ShortenerService

Test coverage includes:

1. Shortening
   - Generated codes are allocated and stored (Scenario A).
   - Custom codes are validated and conflicts surface (Scenario B).
   - Generated codes losing a registration race are regenerated.
   - Invalid URLs, codes, titles, descriptions and expiries raise ValidationError.

2. Resolving
   - Resolving returns the original URL and counts exactly one visit.
   - Click tracking failures never block the redirect, whatever Redis error caused them.
   - Expired links raise LinkExpiredError and are not counted.
   - Store failures while resolving propagate as DataStoreError.

3. Management
   - Listing validates pagination.
   - Updates validate patches before touching the store.
   - Ownership errors from the store propagate (Scenario D).
"""

import dataclasses
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock, call

import pytest
import redis
from freezegun import freeze_time

from linkshortener.models import UrlRecordModel, UrlRecordPatch
from linkshortener.services import ShortenerService
from linkshortener.exceptions import ForbiddenError, ValidationError
from linkshortener.dao.base import ShortCodeBaseDAO, UrlRecordBaseDAO, ClickBaseDAO
from linkshortener.dao.redis import ClickRedisDAO
from linkshortener.dao.exceptions import (
    DataStoreError,
    LinkExpiredError,
    ShortCodeAlreadyExistsError,
    ShortCodeGenerationError,
    ShortCodeNotFoundError,
    UrlRecordNotFoundError,
)
from linkshortener.utils.constants import MAX_SHORTCODE_ATTEMPTS


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def code_dao():
    dao = MagicMock(spec=ShortCodeBaseDAO)
    dao.allocate.side_effect = lambda requested_code=None: requested_code or 'Xb3_k9Q'
    return dao


@pytest.fixture
def url_dao(url_record):
    dao = MagicMock(spec=UrlRecordBaseDAO)
    dao.create.side_effect = lambda original_url, short_code, **kw: dataclasses.replace(
        url_record, original_url=original_url, short_code=short_code, clicks=0, **kw
    )
    dao.get_by_code.return_value = url_record
    dao.get_by_id.return_value = url_record
    return dao


@pytest.fixture
def click_dao():
    dao = MagicMock(spec=ClickBaseDAO)
    dao.record_visit.return_value = 1
    return dao


@pytest.fixture
def service(code_dao, url_dao, click_dao):
    return ShortenerService(code_dao=code_dao, url_dao=url_dao, click_dao=click_dao)


# -------------------------------
# 1. Shortening
# -------------------------------


def test_shorten_with_generated_code(service, code_dao, url_dao):
    """Scenario A (create): a 7-character code is generated and stored."""
    url = service.shorten('https://example.com/a')

    assert url.short_code == 'Xb3_k9Q'
    assert len(url.short_code) == 7
    assert url.original_url == 'https://example.com/a'
    code_dao.allocate.assert_called_once_with()
    url_dao.create.assert_called_once_with(
        'https://example.com/a', 'Xb3_k9Q', owner_id=None, title=None, description=None, expires_at=None
    )


def test_shorten_then_resolve_counts_one_click(service, url_dao, click_dao):
    """Scenario A (resolve): one redirect increments lifetime clicks to 1."""
    url = service.shorten('https://example.com/a')
    url_dao.get_by_code.return_value = url

    assert service.resolve(url.short_code) == 'https://example.com/a'
    click_dao.record_visit.assert_called_once_with(url.id)
    assert click_dao.record_visit.return_value == 1


def test_shorten_with_custom_code_and_metadata(service, code_dao, url_dao):
    url = service.shorten('https://example.com/a', custom_code='my-link', title='A', description='About A', owner_id='user-1')

    assert url.short_code == 'my-link'
    code_dao.allocate.assert_called_once_with('my-link')
    url_dao.create.assert_called_once_with(
        'https://example.com/a', 'my-link', owner_id='user-1', title='A', description='About A', expires_at=None
    )


def test_shorten_with_taken_custom_code(service, code_dao, url_dao):
    """Scenario B: the second request for the same custom code conflicts."""
    service.shorten('https://example.com/a', custom_code='my-link')
    code_dao.allocate.side_effect = ShortCodeAlreadyExistsError("Short code 'my-link' already exists.")

    with pytest.raises(ShortCodeAlreadyExistsError):
        service.shorten('https://example.com/b', custom_code='my-link')
    assert url_dao.create.call_count == 1


def test_shorten_with_custom_code_losing_registration_race(service, url_dao):
    url_dao.create.side_effect = ShortCodeAlreadyExistsError("Short code 'my-link' already exists.")

    with pytest.raises(ShortCodeAlreadyExistsError):
        service.shorten('https://example.com/a', custom_code='my-link')
    assert url_dao.create.call_count == 1


def test_shorten_regenerates_code_losing_registration_race(service, code_dao, url_dao, url_record):
    code_dao.allocate.side_effect = ['aaaaaaa', 'bbbbbbb']
    url_dao.create.side_effect = [
        ShortCodeAlreadyExistsError("Short code 'aaaaaaa' already exists."),
        dataclasses.replace(url_record, short_code='bbbbbbb'),
    ]

    assert service.shorten('https://example.com/a').short_code == 'bbbbbbb'
    assert url_dao.create.call_args_list[1] == call(
        'https://example.com/a', 'bbbbbbb', owner_id=None, title=None, description=None, expires_at=None
    )


def test_shorten_gives_up_after_max_attempts(service, url_dao):
    url_dao.create.side_effect = ShortCodeAlreadyExistsError('taken')

    with pytest.raises(ShortCodeGenerationError):
        service.shorten('https://example.com/a')
    assert url_dao.create.call_count == MAX_SHORTCODE_ATTEMPTS


@pytest.mark.parametrize(
    'kwargs, field',
    [
        ({'original_url': 'not-a-url'}, 'originalUrl'),
        ({'original_url': 'ftp://example.com/file'}, 'originalUrl'),
        ({'original_url': ''}, 'originalUrl'),
        ({'custom_code': 'ab'}, 'customCode'),
        ({'custom_code': 'a' * 51}, 'customCode'),
        ({'custom_code': 'has space'}, 'customCode'),
        ({'custom_code': 'slash/code'}, 'customCode'),
        ({'title': 't' * 201}, 'title'),
        ({'description': 'd' * 501}, 'description'),
        ({'expires_at': datetime(2020, 1, 1, tzinfo=UTC)}, 'expiresAt'),
        ({'expires_at': datetime(2100, 1, 1)}, 'expiresAt'),
    ],
)
def test_shorten_with_invalid_input(service, url_dao, kwargs, field):
    kwargs = {'original_url': 'https://example.com/a', **kwargs}

    with pytest.raises(ValidationError) as excinfo:
        service.shorten(**kwargs)

    assert excinfo.value.field == field
    url_dao.create.assert_not_called()


@pytest.mark.parametrize('code', ['abc', 'a' * 50, 'My_Link-2'])
def test_shorten_with_boundary_custom_codes(service, code):
    assert service.shorten('https://example.com/a', custom_code=code).short_code == code


def test_shorten_with_boundary_metadata(service):
    url = service.shorten('https://example.com/a', title='t' * 200, description='d' * 500)
    assert len(url.title) == 200
    assert len(url.description) == 500


# -------------------------------
# 2. Resolving
# -------------------------------


def test_resolve(service, url_dao, click_dao, url_record):
    assert service.resolve('my-article') == url_record.original_url
    url_dao.get_by_code.assert_called_once_with('my-article')
    click_dao.record_visit.assert_called_once_with(url_record.id)


@pytest.mark.parametrize('error', [DataStoreError('down'), UrlRecordNotFoundError('gone')])
def test_resolve_when_click_tracking_fails(service, click_dao, url_record, error):
    """The redirect still succeeds when the visit can't be counted."""
    click_dao.record_visit.side_effect = error

    assert service.resolve('my-article') == url_record.original_url


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ResponseError("OOM command not allowed when used memory > 'maxmemory'."),
        redis.exceptions.ResponseError('WRONGTYPE Operation against a key holding the wrong kind of value'),
        redis.exceptions.ConnectionError('Connection error'),
    ],
)
def test_resolve_when_redis_rejects_visit(code_dao, url_dao, redis_client, url_record, error):
    """The redirect still succeeds when Redis refuses the click transaction."""
    redis_client.execute.side_effect = error
    service = ShortenerService(code_dao=code_dao, url_dao=url_dao, click_dao=ClickRedisDAO(redis_client=redis_client))

    assert service.resolve('my-article') == url_record.original_url
    redis_client.hincrby.assert_called_once()


@pytest.mark.parametrize('error', [ShortCodeNotFoundError('missing'), DataStoreError('down')])
def test_resolve_propagates_lookup_errors(service, url_dao, click_dao, error):
    url_dao.get_by_code.side_effect = error

    with pytest.raises(type(error)):
        service.resolve('my-article')
    click_dao.record_visit.assert_not_called()


@freeze_time('2025-10-15')
def test_resolve_expired_link(service, url_dao, click_dao, url_record):
    url_dao.get_by_code.return_value = dataclasses.replace(url_record, expires_at=datetime(2025, 10, 14, tzinfo=UTC))

    with pytest.raises(LinkExpiredError):
        service.resolve('my-article')
    click_dao.record_visit.assert_not_called()


@freeze_time('2025-10-15')
def test_resolve_link_before_expiry(service, url_dao, click_dao, url_record):
    url_dao.get_by_code.return_value = dataclasses.replace(url_record, expires_at=datetime(2025, 10, 15, tzinfo=UTC) + timedelta(seconds=1))

    assert service.resolve('my-article') == url_record.original_url
    click_dao.record_visit.assert_called_once()


# -------------------------------
# 3. Management
# -------------------------------


def test_get_url(service, url_record):
    assert service.get_url(url_record.id) == url_record
    assert service.get_url(url_record.id, 'user-1') == url_record


def test_get_url_by_non_owner(service, url_record):
    with pytest.raises(ForbiddenError):
        service.get_url(url_record.id, 'user-2')


def test_list_urls(service, url_dao, url_record):
    url_dao.list_by_owner.return_value = [url_record]

    assert service.list_urls('user-1') == [url_record]
    url_dao.list_by_owner.assert_called_once_with('user-1', limit=50, offset=0)


def test_list_urls_defaults_limit(service, url_dao):
    url_dao.list_by_owner.return_value = []

    service.list_urls('user-1', limit=None, offset=5)
    url_dao.list_by_owner.assert_called_once_with('user-1', limit=50, offset=5)


@pytest.mark.parametrize('limit, offset, field', [(0, 0, 'limit'), (1001, 0, 'limit'), (10, -1, 'offset'), (True, 0, 'limit')])
def test_list_urls_with_invalid_page(service, url_dao, limit, offset, field):
    with pytest.raises(ValidationError) as excinfo:
        service.list_urls('user-1', limit=limit, offset=offset)

    assert excinfo.value.field == field
    url_dao.list_by_owner.assert_not_called()


def test_update_url(service, url_dao, url_record):
    updated = dataclasses.replace(url_record, title='Renamed')
    url_dao.update.return_value = updated
    patch = UrlRecordPatch(title='Renamed')

    assert service.update_url(url_record.id, 'user-1', patch) == updated
    url_dao.update.assert_called_once_with(url_record.id, 'user-1', patch)


@pytest.mark.parametrize(
    'patch, field',
    [
        (UrlRecordPatch(short_code='x'), 'customCode'),
        (UrlRecordPatch(title='t' * 201), 'title'),
        (UrlRecordPatch(description='d' * 501), 'description'),
    ],
)
def test_update_url_with_invalid_patch(service, url_dao, patch, field):
    with pytest.raises(ValidationError) as excinfo:
        service.update_url('rec1', 'user-1', patch)

    assert excinfo.value.field == field
    url_dao.update.assert_not_called()


def test_delete_url(service, url_dao):
    service.delete_url('rec1', 'user-1')
    url_dao.delete.assert_called_once_with('rec1', 'user-1')


def test_delete_url_by_non_owner(service, url_dao):
    """Scenario D: the store's ownership check surfaces as ForbiddenError."""
    url_dao.delete.side_effect = ForbiddenError("Not authorized to delete URL record 'rec1'.")

    with pytest.raises(ForbiddenError):
        service.delete_url('rec1', 'user-2')
