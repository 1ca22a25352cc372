# admin_client/services/credentials.py
"""
Session credential storage for the admin client.

A single bearer token is kept as a cookie named ``accessToken`` with a
fixed expiry set at write time, the secure flag, and ``SameSite=Strict``.
Expiry is enforced through the cookie itself (``Cookie.is_expired``).
"""
import logging
import time
from datetime import timedelta
from http.cookiejar import Cookie, LoadError, LWPCookieJar
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from requests.cookies import create_cookie

from admin_client.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "accessToken"
DEFAULT_TTL = timedelta(days=7)


class CredentialStore(Protocol):
    def get(self) -> Optional[str]:
        ...

    def set(self, token: str) -> None:
        ...

    def remove(self) -> None:
        ...


def make_token_cookie(token: str, expires_at: float, *, name: str = TOKEN_COOKIE,
                      secure: bool = True, samesite: str = "Strict") -> Cookie:
    return create_cookie(
        name,
        token,
        path="/",
        secure=secure,
        expires=int(expires_at),
        discard=False,
        rest={"SameSite": samesite},
    )


class InMemoryCredentialStore:
    """Same contract as the cookie file store, without persistence."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], float] = time.time):
        self._ttl = ttl
        self._clock = clock
        self._cookie: Optional[Cookie] = None

    def get(self) -> Optional[str]:
        cookie = self._cookie
        if cookie is None or cookie.is_expired(self._clock()):
            return None
        return cookie.value

    def set(self, token: str) -> None:
        self._cookie = make_token_cookie(token, self._clock() + self._ttl.total_seconds())

    def remove(self) -> None:
        self._cookie = None


class CookieCredentialStore:
    """Keeps the token in an LWP cookie file so it survives restarts."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        name: str = TOKEN_COOKIE,
        ttl: timedelta = DEFAULT_TTL,
        secure: bool = True,
        samesite: str = "Strict",
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.name = name
        self._ttl = ttl
        self._secure = secure
        self._samesite = samesite
        self._clock = clock

    def _load(self) -> LWPCookieJar:
        jar = LWPCookieJar(str(self.path))
        if not self.path.exists():
            return jar
        try:
            # expiry is checked against our own clock in get()
            jar.load(ignore_discard=True, ignore_expires=True)
        except (LoadError, OSError) as ex:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, ex)
            jar.clear()
        return jar

    def _cookie(self) -> Optional[Cookie]:
        for cookie in self._load():
            if cookie.name == self.name:
                return cookie
        return None

    def get(self) -> Optional[str]:
        cookie = self._cookie()
        if cookie is None:
            return None
        if cookie.is_expired(self._clock()):
            logger.debug("Stored credential expired")
            return None
        return cookie.value

    def set(self, token: str) -> None:
        jar = LWPCookieJar(str(self.path))
        jar.set_cookie(make_token_cookie(
            token,
            self._clock() + self._ttl.total_seconds(),
            name=self.name,
            secure=self._secure,
            samesite=self._samesite,
        ))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            jar.save(ignore_discard=True, ignore_expires=True)
        except OSError as ex:
            logger.error("Could not persist credential to %s: %s", self.path, ex)
            return
        logger.info("Credential stored (expires in %s)", self._ttl)

    def remove(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as ex:
            logger.error("Could not remove credential file %s: %s", self.path, ex)
            return
        logger.info("Credential removed")


def build_credential_store(settings: Settings) -> CookieCredentialStore:
    return CookieCredentialStore(
        settings.credential_file,
        ttl=timedelta(days=settings.credential_ttl_days),
        secure=settings.cookie_secure,
    )
