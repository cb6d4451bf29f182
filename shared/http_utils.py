"""HTTP helpers shared by the Cloud Function entry points."""

import json
import logging

from .errors import ArticleDigestError, InputValidationError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'Произошла непредвиденная ошибка. Попробуйте позже.'

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

PREFLIGHT_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Max-Age': '3600'
}


def preflight_response():
    return ('', 204, PREFLIGHT_HEADERS)


def json_response(data: dict, status: int = 200):
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'application/json; charset=utf-8'
    return (json.dumps(data, ensure_ascii=False), status, headers)


def error_response(error: ArticleDigestError):
    return json_response(error.to_dict(), error.status_code)


def unexpected_error_response(message: str = GENERIC_ERROR_MESSAGE):
    return json_response({'error': message}, 500)


def get_request_json(request) -> dict:
    """Return the JSON body as a dict ({} when absent or malformed)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_field(data: dict, name: str, message: str) -> str:
    """Return a non-blank string field or raise InputValidationError."""
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(message)
    return value.strip()


def wants_raw(data: dict) -> bool:
    """True when the caller asked for the raw upstream payload via options.include_raw."""
    options = data.get('options')
    return isinstance(options, dict) and bool(options.get('include_raw'))
