"""Helper utilities for AWS lambda functions and services.

Functions:
    base_url() -> str
        Extract correct public base URL from API Gateway event
    get_short_url() -> str
        Get string representation of short URL for a given shortcode
    utc_now() -> datetime
        Current moment as a timezone-aware UTC datetime
    last_n_days() -> list[date]
        The most recent N calendar days (UTC), oldest first, ending today
    is_absolute_url() -> bool
        Check whether a string is an absolute http(s) URL
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected lambda handler exceptions into HTTP 500

Example:
    >>> from linkshortener.utils.helpers import base_url
    >>> event = {
    ...     "requestContext": {
    ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
    ...         "stage": "Prod"
    ...     }
    ... }
    >>> base_url(event)
    'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

    >>> base_url({})
    'http://localhost:3000'
"""

import os
import json
import logging
import functools
from datetime import date, datetime, timedelta, UTC
from typing import Any
from urllib.parse import urlparse
from collections.abc import Callable

from linkshortener.utils.runtime import running_locally
from linkshortener.utils.constants import UNKNOWN_INTERNAL_SERVER_ERROR


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://sho.rt"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(shortcode: str, event: dict[str, Any]) -> str:
    """Get string representation of shortened URL

    Args:
        shortcode (str): shortcode
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: short url string representation
    """
    return f'{base_url(event).rstrip("/")}/{shortcode}'


def utc_now() -> datetime:
    return datetime.now(UTC)


def last_n_days(days: int) -> list[date]:
    """Return the most recent `days` calendar days in UTC, oldest first

    Args:
        days (int):
            Number of days, today included.

    Returns:
        list[date]:
            Exactly `days` consecutive dates ending with today (UTC).

    Example:
        >>> last_n_days(3)  # on 2026-10-19
        [datetime.date(2026, 10, 17), datetime.date(2026, 10, 18), datetime.date(2026, 10, 19)]
    """
    if days < 0:
        raise ValueError(f'Number of days must be non-negative (given value: {days}).')

    today = utc_now().date()
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def is_absolute_url(value: str) -> bool:
    """Check whether `value` is an absolute http(s) URL with a network location"""
    try:
        components = urlparse(value)
    except ValueError:
        return False
    return components.scheme in {'http', 'https'} and bool(components.netloc) and ' ' not in value


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        KeyError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        KeyError: "Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'"
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise KeyError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with HTTP 500 when a lambda handler raises unexpectedly

    When running locally (SAM, tests with APP_ENV=local) the original exception
    is re-raised so that the traceback stays visible.

    Example:
        >>> @guarantee_500_response
        ... def lambda_handler(event, context):
        ...     raise RuntimeError('boom')
        >>> lambda_handler({}, None)['statusCode']
        500
    """

    @functools.wraps(handler)
    def wrapper(event: dict, context: Any) -> dict:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled exception in lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return {
                'statusCode': 500,
                'body': json.dumps(
                    {
                        'message': 'Internal Server Error',
                        'error_code': UNKNOWN_INTERNAL_SERVER_ERROR,
                    }
                ),
            }

    return wrapper
