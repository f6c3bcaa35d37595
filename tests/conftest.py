"""
Society Admin - Test configuration and fixtures
"""
import os
from typing import Callable

import httpx
import pytest

os.environ.setdefault("SOCIETY_ADMIN_API_URL", "http://test/api")

from society_admin.api.client import ApiClient
from society_admin.services.credentials import MemoryCredentialProvider
from tests.helpers import json_response

BASE_URL = "http://test/api"


@pytest.fixture
def credentials() -> MemoryCredentialProvider:
    return MemoryCredentialProvider("test-token")


@pytest.fixture
def make_client(credentials) -> Callable[[Callable[[httpx.Request], httpx.Response]], ApiClient]:
    """Build an ApiClient whose requests are answered by ``handler``."""

    def factory(handler) -> ApiClient:
        return ApiClient(credentials, base_url=BASE_URL, transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def recorded():
    """Requests captured by a routing handler, in order."""
    return []


@pytest.fixture
def routes(recorded):
    """
    Build a handler from {"METHOD /path": response or callable}.

    Unknown routes answer 404 so a test fails loudly on an unexpected call.
    """

    def factory(table: dict) -> Callable[[httpx.Request], httpx.Response]:
        def handler(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            key = f"{request.method} {request.url.path}"
            answer = table.get(key)
            if answer is None:
                return json_response(404, {"success": False, "message": f"No route {key}"})
            if callable(answer):
                return answer(request)
            return answer

        return handler

    return factory
