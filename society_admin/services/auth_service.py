"""
auth_service.py - Admin login / logout
Single responsibility: exchange CNIC + password for a bearer token.
"""
import logging

from society_admin.api.client import ApiClient
from society_admin.api.errors import ApiError, ValidationError
from society_admin.services.credentials import CredentialProvider
from society_admin.services.resource_service import unwrap

logger = logging.getLogger(__name__)

LOGIN_PATH = "/admin/auth/login"
PROFILE_PATH = "/admin/auth/me"


async def login(
    client: ApiClient, credentials: CredentialProvider, cnic_number: str, password: str
) -> dict:
    """ログインしてトークンを保存する。戻り値は admin 情報（あれば）。"""
    cnic_number = (cnic_number or "").strip()
    if not cnic_number or not password:
        raise ValidationError("Please fill all fields")

    payload = await client.post(
        LOGIN_PATH, json={"cnicNumber": cnic_number, "password": password}
    )
    data = unwrap(payload) if isinstance(payload, dict) else None
    token = data.get("token") if isinstance(data, dict) else None
    if not (isinstance(payload, dict) and payload.get("success")) or not token:
        message = payload.get("message") if isinstance(payload, dict) else None
        raise ApiError(message or "Login failed", payload=payload)

    credentials.set(token)
    logger.info("Admin logged in")
    admin = data.get("admin") or data.get("user")
    return admin if isinstance(admin, dict) else {}


async def profile(client: ApiClient) -> dict:
    data = unwrap(await client.get(PROFILE_PATH))
    return data if isinstance(data, dict) else {}


def logout(credentials: CredentialProvider) -> None:
    credentials.clear(notify=False)
    logger.info("Admin logged out")
