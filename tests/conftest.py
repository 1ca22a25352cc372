# tests/conftest.py
import json
from typing import Any, Dict, List, Tuple

import httpx
import pytest
import requests
from requests.adapters import BaseAdapter
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from admin_client.core.config import Settings
from admin_client.services.api_client import ApiClient, AsyncApiClient
from admin_client.services.credentials import InMemoryCredentialStore

BASE_URL = "http://admin.test"
GOOD_OTP = "123456"
TOKENLESS_OTP = "000000"


class FakeAdminBackend:
    """In-process stand-in for the admin backend.

    Every request is recorded. Responses come from ``canned`` when a
    ``(METHOD, path)`` entry exists, otherwise from a minimal login/OTP flow.
    """

    def __init__(self):
        self.app = FastAPI()
        self.calls: List[Dict[str, Any]] = []
        self.canned: Dict[Tuple[str, str], Tuple[int, Any]] = {}

        @self.app.api_route("/admin/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
        async def admin(path: str, request: Request):
            raw = await request.body()
            call = {
                "method": request.method,
                "path": path,
                "headers": dict(request.headers),
                "query": dict(request.query_params),
                "raw_body": raw,
                "body": json.loads(raw) if raw else None,
            }
            self.calls.append(call)

            if (request.method, path) in self.canned:
                status, content = self.canned[(request.method, path)]
                if isinstance(content, bytes):
                    return Response(content=content, status_code=status, media_type="text/plain")
                return JSONResponse(content, status_code=status)
            return self._flow(request.method, path, call["body"] or {})

    def reply(self, method: str, path: str, status: int, content: Any):
        self.canned[(method, path)] = (status, content)

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]

    def _flow(self, method: str, path: str, body: Dict[str, Any]):
        if (method, path) == ("POST", "login"):
            if body.get("password") == "secret":
                return JSONResponse({"success": True, "message": "OTP sent to your email"})
            return JSONResponse({"message": "Invalid credentials"}, status_code=401)
        if (method, path) == ("POST", "auth/verify-otp"):
            if body.get("userOTP") == GOOD_OTP:
                return JSONResponse({"success": True, "token": f"tok-{body.get('username')}"})
            if body.get("userOTP") == TOKENLESS_OTP:
                return JSONResponse({"success": False})
            return JSONResponse({"message": "Invalid OTP"}, status_code=400)
        if (method, path) in {("POST", "auth/resend-otp"), ("POST", "auth/register"),
                              ("POST", "auth/reset-password")}:
            return JSONResponse({"success": True, "message": "ok"})
        return JSONResponse({"message": "Not found"}, status_code=404)


class StubAdapter(BaseAdapter):
    """requests transport adapter answering every call with one canned response."""

    def __init__(self, status: int = 200, content: bytes = b"{}", exc: Exception = None):
        super().__init__()
        self.status = status
        self.content = content
        self.exc = exc
        self.sent: List[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.sent.append(request)
        if self.exc is not None:
            raise self.exc
        resp = requests.Response()
        resp.status_code = self.status
        resp._content = self.content
        resp.headers["Content-Type"] = "application/json"
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass


@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(api_base_url=BASE_URL)


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def backend():
    return FakeAdminBackend()


@pytest.fixture
async def http(backend):
    transport = httpx.ASGITransport(app=backend.app, raise_app_exceptions=True)
    async with httpx.AsyncClient(transport=transport) as ac:
        yield ac


@pytest.fixture
def client(store, settings, http):
    return AsyncApiClient(store, settings_factory=lambda: settings, http=http)


@pytest.fixture
def stub():
    return StubAdapter()


@pytest.fixture
def sync_client(store, settings, stub):
    session = requests.Session()
    session.mount("http://", stub)
    return ApiClient(store, settings_factory=lambda: settings, session=session)
