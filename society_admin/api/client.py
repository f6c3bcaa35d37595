"""
client.py - REST API client
Single responsibility: send requests to the admin API with the session token
attached, and translate responses into payloads or ApiError.
"""

import logging
from typing import Any

import httpx

from society_admin.api.errors import (
    ApiError,
    AuthenticationError,
    RequestCancelled,
    server_message,
)
from society_admin.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from society_admin.services.credentials import CredentialProvider

logger = logging.getLogger(__name__)


class CancelToken:
    """Marks an in-flight operation as superseded. Checked before results are applied."""

    __slots__ = ("_cancelled",)

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelled()


class ApiClient:
    def __init__(
        self,
        credentials: CredentialProvider,
        base_url: str = API_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credentials = credentials
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self, *, json_body: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        token = self.credentials.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        # Multipart bodies get their content type (with boundary) from httpx.
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _clean_params(params: dict | None) -> dict | None:
        if not params:
            return None
        cleaned = {k: v for k, v in params.items() if v is not None and v != ""}
        return cleaned or None

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        token: CancelToken | None = None,
    ) -> Any:
        if token is not None:
            token.raise_if_cancelled()
        multipart = files is not None
        try:
            response = await self._client.request(
                method,
                path,
                params=self._clean_params(params),
                json=None if multipart else json,
                data=data if multipart else None,
                files=files,
                headers=self._headers(json_body=json is not None and not multipart),
            )
        except httpx.HTTPError as exc:
            if token is not None and token.cancelled:
                raise RequestCancelled() from exc
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        payload = self._decode(response)

        if response.status_code == 401:
            logger.warning("%s %s returned 401; clearing session", method, path)
            self.credentials.clear()
            raise AuthenticationError("Session expired", status=401, payload=payload)

        if token is not None:
            token.raise_if_cancelled()

        if not response.is_success:
            raise ApiError(
                server_message(payload) or f"HTTP {response.status_code}",
                status=response.status_code,
                payload=payload,
            )
        return payload

    async def get(self, path: str, params: dict | None = None, token: CancelToken | None = None):
        return await self.request("GET", path, params=params, token=token)

    async def post(self, path: str, json: Any = None, data=None, files=None, token=None):
        return await self.request("POST", path, json=json, data=data, files=files, token=token)

    async def put(self, path: str, json: Any = None, data=None, files=None, token=None):
        return await self.request("PUT", path, json=json, data=data, files=files, token=token)

    async def patch(self, path: str, json: Any = None, token: CancelToken | None = None):
        return await self.request("PATCH", path, json=json, token=token)

    async def delete(self, path: str, token: CancelToken | None = None):
        return await self.request("DELETE", path, token=token)
