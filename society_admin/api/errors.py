"""
errors.py - API error taxonomy
Single responsibility: exceptions raised by the HTTP client and services.
"""


def server_message(payload) -> str | None:
    """Pick the human readable message out of an error body, if any."""
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class ApiError(Exception):
    """Network or server failure. ``status`` is None for transport errors."""

    def __init__(self, message: str, status: int | None = None, payload=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def server_message(self) -> str | None:
        return server_message(self.payload)


class AuthenticationError(ApiError):
    """401 from the API. The stored credential has already been cleared."""


class RequestCancelled(Exception):
    """The request was superseded by a newer one; its result must be ignored."""


class ValidationError(ValueError):
    """Required input missing or malformed; raised before any request is sent."""
