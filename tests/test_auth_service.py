"""
Tests for admin login and logout
"""
import pytest

from society_admin.api.errors import ApiError, ValidationError
from society_admin.services import auth_service
from society_admin.services.credentials import MemoryCredentialProvider
from tests.helpers import json_response, request_json


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_stores_token(self, make_client, credentials, recorded, routes):
        """A successful login replaces the stored token and returns the admin"""
        client = make_client(
            routes(
                {
                    "POST /api/admin/auth/login": json_response(
                        200,
                        {"success": True, "data": {"token": "new-jwt", "admin": {"fullName": "Admin"}}},
                    )
                }
            )
        )

        admin = await auth_service.login(client, credentials, " 42201-1111111-1 ", "secret")

        assert admin == {"fullName": "Admin"}
        assert credentials.get() == "new-jwt"
        assert request_json(recorded[0]) == {"cnicNumber": "42201-1111111-1", "password": "secret"}

    @pytest.mark.asyncio
    async def test_blank_fields(self, make_client, recorded, routes):
        client = make_client(routes({}))

        with pytest.raises(ValidationError, match="Please fill all fields"):
            await auth_service.login(client, MemoryCredentialProvider(), "", "secret")

        assert recorded == []

    @pytest.mark.asyncio
    async def test_unsuccessful_response(self, make_client, routes):
        client = make_client(
            routes({"POST /api/admin/auth/login": json_response(200, {"success": False, "message": "Not an admin"})})
        )
        credentials = MemoryCredentialProvider()

        with pytest.raises(ApiError, match="Not an admin"):
            await auth_service.login(client, credentials, "42201-1111111-1", "secret")

        assert credentials.get() is None

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, make_client, routes):
        client = make_client(
            routes({"POST /api/admin/auth/login": json_response(400, {"success": False, "message": "Invalid credentials"})})
        )

        with pytest.raises(ApiError, match="Invalid credentials"):
            await auth_service.login(client, MemoryCredentialProvider(), "42201-1111111-1", "wrong")


class TestProfileAndLogout:
    @pytest.mark.asyncio
    async def test_profile(self, make_client, routes):
        client = make_client(
            routes({"GET /api/admin/auth/me": json_response(200, {"success": True, "data": {"fullName": "Admin"}})})
        )

        assert await auth_service.profile(client) == {"fullName": "Admin"}

    def test_logout_does_not_signal_expiry(self):
        credentials = MemoryCredentialProvider("jwt")
        expired = []
        credentials.subscribe_invalidated(lambda: expired.append(True))

        auth_service.logout(credentials)

        assert credentials.get() is None
        assert expired == []
