"""
Response helpers for the HTTP Cloud Functions.

Handlers return (body, status, headers) tuples, which functions_framework
hands to Flask unchanged.
"""

import json
from typing import Any, Dict, Optional, Tuple

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

Response = Tuple[str, int, Dict[str, str]]


def preflight_response(methods: str = 'POST') -> Response:
    """Answer a CORS preflight (OPTIONS) request."""
    headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Methods': methods,
        'Access-Control-Allow-Headers': 'Content-Type',
        'Access-Control-Max-Age': '3600',
    }
    return ('', 204, headers)


def json_response(payload: Dict[str, Any], status: int = 200) -> Response:
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'application/json; charset=utf-8'
    return (json.dumps(payload, ensure_ascii=False), status, headers)


def error_response(message: str, status: int, details: Optional[str] = None) -> Response:
    payload = {'success': False, 'error': message}
    if details:
        payload['details'] = details
    return json_response(payload, status)


def html_response(body: str, status: int = 200) -> Response:
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'text/html; charset=utf-8'
    return (body, status, headers)
