"""Unit tests for handle_redis_connection_error decorator.

Test coverage includes:
    1. Normal function execution
       - Ensures the wrapped method executes and returns its result.
    2. Connection error handling
       - Ensures Redis connection errors and timeouts are converted into DataStoreError.
       - Ensures other exceptions pass through untouched.
    3. Function metadata preservation
       - Confirms functools.wraps preserves the original function's name and docstring.
"""

import pytest
import redis
from unittest.mock import MagicMock

from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.exceptions import DataStoreError, ShortCodeNotFoundError


class DummyDAO:
    def __init__(self):
        self.redis = MagicMock()
        self.redis.connection_pool.connection_kwargs = {
            'host': 'localhost',
            'port': 6379,
            'db': 0,
        }

    @handle_redis_connection_error
    def ping(self):
        return 'OK'

    @handle_redis_connection_error
    def fail(self, error: Exception):
        raise error


# -------------------------------
# 1. Normal execution
# -------------------------------


def test_decorator_allows_normal_execution():
    """Ensure the wrapped function executes normally when no error occurs."""
    assert DummyDAO().ping() == 'OK'


# -------------------------------
# 2. Connection error handling
# -------------------------------


def test_decorator_transforms_redis_connection_error():
    """Ensure Redis ConnectionError is caught and re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match="Can't connect to Redis at localhost:6379/0."):
        DummyDAO().fail(redis.exceptions.ConnectionError('Cannot connect'))


def test_decorator_transforms_redis_timeout_error():
    """Ensure Redis TimeoutError is caught and re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match='Redis operation timed out at localhost:6379/0.'):
        DummyDAO().fail(redis.exceptions.TimeoutError('Timeout reading from socket'))


def test_decorator_keeps_business_errors():
    with pytest.raises(ShortCodeNotFoundError):
        DummyDAO().fail(ShortCodeNotFoundError("Short code 'abc' not found."))


# -------------------------------
# 3. Function metadata preservation
# -------------------------------


def test_decorator_preserves_function_metadata():
    """Ensure function name and docstring are preserved via functools.wraps."""

    @handle_redis_connection_error
    def sample_function():
        """This is a sample docstring."""
        return 'OK'

    assert sample_function.__name__ == 'sample_function'
    assert 'sample docstring' in sample_function.__doc__
