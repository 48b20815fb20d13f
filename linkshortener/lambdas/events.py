"""Helpers for reading API Gateway (Lambda proxy) events

Functions:
    requester_id(event) -> str | None
        Cognito user id (`sub` claim) of the caller, if authenticated.
    path_parameter(event, name) -> str | None
    query_parameter(event, name) -> str | None
    json_body(event) -> dict
        Parsed JSON object body. Raises ValueError on malformed bodies.
"""

import json
from linkshortener.types import JsonBody, LambdaEvent


def requester_id(event: LambdaEvent) -> str | None:
    claims = ((event.get('requestContext') or {}).get('authorizer') or {}).get('claims') or {}
    return claims.get('sub') or None


def path_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('pathParameters') or {}).get(name) or None


def query_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('queryStringParameters') or {}).get(name)


def json_body(event: LambdaEvent) -> JsonBody:
    """Parse the event body as a JSON object (an empty body parses as {})

    Raises:
        ValueError:
            If the body is not valid JSON or not a JSON object.
    """
    body = json.loads(event.get('body') or '{}')
    if not isinstance(body, dict):
        raise ValueError('JSON body must be an object')
    return body
