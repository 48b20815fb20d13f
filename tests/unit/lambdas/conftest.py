import json
from typing import Any, cast

import pytest

from linkshortener.types import LambdaContext, LambdaEvent


def _apigw_event(
    *,
    method: str,
    resource: str,
    path: str,
    path_parameters: dict | None = None,
    query: dict | None = None,
    body: Any = None,
    user_id: str | None = None,
) -> LambdaEvent:
    """Build an API Gateway (Lambda proxy) event."""
    request_context = {'domainName': 'sho.rt', 'stage': 'test', 'resourcePath': resource, 'httpMethod': method}
    if user_id is not None:
        request_context['authorizer'] = {'claims': {'sub': user_id}}

    return cast(LambdaEvent, {
        'resource': resource,
        'path': path,
        'httpMethod': method,
        'pathParameters': path_parameters,
        'queryStringParameters': query,
        'requestContext': request_context,
        'body': body if body is None or isinstance(body, str) else json.dumps(body),
    })


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'test'})


@pytest.fixture(autouse=True)
def _not_running_locally(monkeypatch):
    """Unexpected handler errors become 500 responses, as in AWS."""
    monkeypatch.setattr('linkshortener.utils.helpers.running_locally', lambda: False)


@pytest.fixture
def apigw_event():
    """Factory for API Gateway (Lambda proxy) events."""
    return _apigw_event
