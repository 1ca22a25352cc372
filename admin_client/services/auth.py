# admin_client/services/auth.py
"""
Login flow on top of the admin API client.

Password login only triggers an OTP; the session token is issued (and
stored) once the OTP is verified.
"""
import logging
import re
from typing import Any

from admin_client.services.api_client import AsyncApiClient, HttpMethod
from admin_client.services.credentials import CredentialStore
from admin_client.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

OTP_PATTERN = re.compile(r"^\d{6}$")


class AuthService:
    def __init__(self, client: AsyncApiClient, store: CredentialStore):
        self.client = client
        self.store = store

    def is_authenticated(self) -> bool:
        return self.store.get() is not None

    async def login(self, username: str, password: str) -> Any:
        return await self.client.request(
            "login", HttpMethod.POST, {"username": username, "password": password}
        )

    async def verify_otp(self, username: str, otp: str) -> Any:
        otp = (otp or "").strip()
        if not OTP_PATTERN.match(otp):
            raise ValueError("Please enter a valid 6-digit OTP")

        data = await self.client.request(
            "auth/verify-otp", HttpMethod.POST, {"username": username, "userOTP": otp}
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Authentication failed. Please try again.", payload=data)

        self.store.set(token)
        logger.info("OTP verified for %s; session started", username)
        return data

    async def resend_otp(self, username: str) -> Any:
        return await self.client.request("auth/resend-otp", HttpMethod.POST, {"username": username})

    async def register(self, username: str, email: str, password: str) -> Any:
        return await self.client.request(
            "auth/register",
            HttpMethod.POST,
            {"username": username, "email": email, "password": password},
        )

    async def reset_password(self, email: str) -> Any:
        return await self.client.request("auth/reset-password", HttpMethod.POST, {"email": email})

    def logout(self) -> None:
        self.store.remove()
        logger.info("Logged out")
