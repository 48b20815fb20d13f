from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from linkshortener.models import UrlRecordModel


@pytest.fixture
def app_prefix() -> str:
    """Provide a consistent Redis key prefix for testing."""
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.exists.return_value = False
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    client.get.return_value = None
    client.hgetall.return_value = {}
    client.hexists.return_value = True
    client.transaction.side_effect = lambda func, *watches, **kwargs: func(client)
    return client


@pytest.fixture
def url_record() -> UrlRecordModel:
    return UrlRecordModel(
        id='V1StGXR8_Z5jdHi6B-myT',
        original_url='https://example.com/blog/article-123',
        short_code='my-article',
        owner_id='user-1',
        title='My article',
        description=None,
        clicks=7,
        created_at=datetime(2025, 10, 1, 12, 0, tzinfo=UTC),
        updated_at=datetime(2025, 10, 2, 12, 0, tzinfo=UTC),
        expires_at=None,
    )
