"""
Shared helpers for building mock API responses
"""
import json

import httpx


def json_response(status_code: int = 200, body=None) -> httpx.Response:
    return httpx.Response(status_code, json=body if body is not None else {"success": True})


def request_json(request: httpx.Request):
    """Decoded JSON body of a captured request (None when empty)."""
    if not request.content:
        return None
    return json.loads(request.content)
