"""
Tests for the REST API client
"""
import httpx
import pytest

from society_admin.api.client import CancelToken
from society_admin.api.errors import ApiError, AuthenticationError, RequestCancelled
from tests.helpers import json_response, request_json


class TestRequests:
    """Headers, params and bodies sent to the API"""

    @pytest.mark.asyncio
    async def test_bearer_token_attached(self, make_client, recorded, routes):
        """Every request carries the stored token"""
        client = make_client(routes({"GET /api/admin/users": json_response(200, {"data": []})}))

        await client.get("/admin/users")

        assert recorded[0].headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_no_authorization_without_token(self, make_client, credentials, recorded, routes):
        """Without a token no Authorization header is sent"""
        credentials.clear(notify=False)
        client = make_client(routes({"GET /api/admin/users": json_response()}))

        await client.get("/admin/users")

        assert "Authorization" not in recorded[0].headers

    @pytest.mark.asyncio
    async def test_empty_params_dropped(self, make_client, recorded, routes):
        """None and empty string params are not sent"""
        client = make_client(routes({"GET /api/admin/payments": json_response()}))

        await client.get("/admin/payments", params={"status": "pending", "month": "", "year": None})

        assert dict(recorded[0].url.params) == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_json_body(self, make_client, recorded, routes):
        """JSON bodies are sent with a JSON content type"""
        client = make_client(routes({"PUT /api/admin/users/u1/reject": json_response()}))

        await client.put("/admin/users/u1/reject", json={"reason": "Fake documents"})

        assert recorded[0].headers["Content-Type"] == "application/json"
        assert request_json(recorded[0]) == {"reason": "Fake documents"}

    @pytest.mark.asyncio
    async def test_multipart_body(self, make_client, recorded, routes):
        """Files go out as multipart with the form fields alongside"""
        client = make_client(routes({"POST /api/admin/deals": json_response(201)}))

        await client.post(
            "/admin/deals",
            data={"name": "Pizza"},
            files={"image": ("deal.png", b"\x89PNG", "image/png")},
        )

        content_type = recorded[0].headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        assert b'name="name"' in recorded[0].content
        assert b'filename="deal.png"' in recorded[0].content

    @pytest.mark.asyncio
    async def test_returns_decoded_payload(self, make_client, routes):
        """The response body comes back decoded"""
        body = {"success": True, "data": [{"_id": "a"}]}
        client = make_client(routes({"GET /api/admin/complaints": json_response(200, body)}))

        assert await client.get("/admin/complaints") == body


class TestErrors:
    """Failure translation"""

    @pytest.mark.asyncio
    async def test_server_message_used(self, make_client, routes):
        """A non-2xx response raises ApiError with the server message"""
        client = make_client(
            routes({"PUT /api/admin/payments/p1/approve": json_response(400, {"message": "Already approved"})})
        )

        with pytest.raises(ApiError) as exc_info:
            await client.put("/admin/payments/p1/approve", json={})

        assert exc_info.value.message == "Already approved"
        assert exc_info.value.status == 400
        assert exc_info.value.server_message == "Already approved"

    @pytest.mark.asyncio
    async def test_status_fallback_message(self, make_client, routes):
        """Without a message the HTTP status is reported"""
        client = make_client(routes({"GET /api/admin/users": httpx.Response(500, text="oops")}))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/admin/users")

        assert exc_info.value.message == "HTTP 500"
        assert exc_info.value.server_message is None

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client):
        """Connection failures surface as ApiError without a status"""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/admin/users")

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_unauthorized_clears_session(self, make_client, credentials, routes):
        """A 401 clears the token and notifies subscribers exactly once"""
        invalidated = []
        credentials.subscribe_invalidated(lambda: invalidated.append(True))
        client = make_client(routes({"GET /api/admin/users": json_response(401, {"message": "jwt expired"})}))

        with pytest.raises(AuthenticationError):
            await client.get("/admin/users")

        assert credentials.get() is None
        assert invalidated == [True]

    @pytest.mark.asyncio
    async def test_cancelled_token_sends_nothing(self, make_client, recorded, routes):
        """A token cancelled before the call prevents the request"""
        client = make_client(routes({"GET /api/admin/users": json_response()}))
        token = CancelToken()
        token.cancel()

        with pytest.raises(RequestCancelled):
            await client.get("/admin/users", token=token)

        assert recorded == []

    @pytest.mark.asyncio
    async def test_cancelled_during_request(self, make_client):
        """A token cancelled while the request was in flight discards the response"""
        token = CancelToken()

        def handler(request):
            token.cancel()
            return json_response(200, {"data": []})

        client = make_client(handler)

        with pytest.raises(RequestCancelled):
            await client.get("/admin/users", token=token)
