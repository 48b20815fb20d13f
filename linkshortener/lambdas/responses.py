"""API Gateway (Lambda proxy) response builders shared by all handlers

Every error body carries a human-readable `message` and, where available, a
machine-readable `errorCode` (see the `constants` module of each lambda).

Example:
    >>> response_404(message="short url https://sho.rt/abc123 doesn't exist", error_code='SHORT_URL_NOT_FOUND')
    {'statusCode': 404, 'headers': {...}, 'body': '{"message": "Not Found (short url ...)", "errorCode": "SHORT_URL_NOT_FOUND"}'}
"""

import json
from typing import Any


JSON_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type,Authorization',
    'Access-Control-Allow-Methods': 'OPTIONS,GET,POST,PATCH,DELETE',
}


def _response(status_code: int, body: Any, headers: dict | None = None) -> dict:
    return {
        'statusCode': status_code,
        'headers': {**JSON_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def _error(status_code: int, base: str, message: str | None, error_code: str | None, **extra) -> dict:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    body.update({k: v for k, v in extra.items() if v is not None})
    return _response(status_code, body)


def response_200(body: Any) -> dict:
    return _response(200, body)


def response_201(body: Any, *, location: str | None = None) -> dict:
    return _response(201, body, headers={'Location': location} if location else None)


def response_204() -> dict:
    return {'statusCode': 204, 'headers': dict(JSON_HEADERS), 'body': ''}


def response_302(*, location: str) -> dict:
    return {
        'statusCode': 302,
        'headers': {**JSON_HEADERS, 'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None, field: str | None = None) -> dict:
    return _error(400, 'Bad Request', message, error_code, field=field)


def response_401(message: str | None = None, error_code: str | None = None) -> dict:
    return _error(401, 'Unauthorized', message, error_code)


def response_403(message: str | None = None, error_code: str | None = None) -> dict:
    return _error(403, 'Forbidden', message, error_code)


def response_404(message: str | None = None, error_code: str | None = None) -> dict:
    return _error(404, 'Not Found', message, error_code)


def response_409(message: str | None = None, error_code: str | None = None) -> dict:
    return _error(409, 'Conflict', message, error_code)


def response_500(message: str | None = None, error_code: str | None = None) -> dict:
    return _error(500, 'Internal Server Error', message, error_code)
