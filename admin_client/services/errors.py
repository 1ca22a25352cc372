# admin_client/services/errors.py
from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "API request failed"


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ApiConfigError(ApiError):
    """Client is not configured well enough to issue a request."""


class ApiTransportError(ApiError):
    """The request never produced an HTTP response (network, DNS, timeout)."""


class ApiResponseError(ApiError):
    """Backend answered with a non-2xx status."""


class ApiParseError(ApiError, ValueError):
    """Response body could not be decoded as JSON."""


class AuthenticationError(ApiError):
    pass


def error_message(payload: Any) -> str:
    """Pick the backend-supplied ``message`` out of an error body, if any."""
    if isinstance(payload, dict):
        msg = payload.get("message")
        if msg:
            return str(msg)
    return DEFAULT_ERROR_MESSAGE
