# admin_client/services/api_client.py
"""
Authenticated client for the admin API.

Every call goes to ``<base>/admin/<endpoint>`` with JSON and no-cache
headers, plus ``Authorization: Bearer <token>`` when the credential store
holds a token. Any failed call (no response, non-2xx status, unreadable
body) purges the stored credential according to the purge policy, notifies
the error hook and subscribed listeners, then raises an ``ApiError``.

``AsyncApiClient`` (httpx) and ``ApiClient`` (requests) share the exact same
request preparation and response classification.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import httpx
import requests

from admin_client.core.config import PurgePolicy, Settings, get_settings
from admin_client.services.credentials import CredentialStore
from admin_client.services.errors import (
    DEFAULT_ERROR_MESSAGE,
    ApiConfigError,
    ApiError,
    ApiParseError,
    ApiResponseError,
    ApiTransportError,
    error_message,
)

logger = logging.getLogger(__name__)

BASE_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}
AUTH_FAILURE_STATUSES = frozenset({401, 403})


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class PreparedCall:
    endpoint: str
    method: str
    url: str
    headers: Dict[str, str]
    content: Optional[bytes]
    params: Optional[Dict[str, Any]]
    timeout: float


@dataclass(frozen=True)
class ApiFailure:
    """Delivered to subscribed listeners for every failed call."""
    endpoint: str
    method: str
    error: ApiError
    purged: bool

    @property
    def status_code(self) -> Optional[int]:
        return self.error.status_code


ErrorHook = Callable[[ApiError], None]
FailureListener = Callable[[ApiFailure], None]


def build_url(base_url: str, endpoint: str) -> str:
    return f"{base_url.rstrip('/')}/admin/{endpoint.lstrip('/')}"


def decode_response(status_code: int, content: bytes) -> Any:
    """Return the parsed body of a 2xx response, raise ApiError otherwise."""
    ok = 200 <= status_code < 300
    if status_code == 204:
        return None
    try:
        payload = json.loads(content)
    except ValueError as ex:
        raise ApiParseError(
            f"Invalid JSON in response (HTTP {status_code})",
            status_code=status_code,
            payload=content.decode("utf-8", errors="replace"),
        ) from ex
    if not ok:
        raise ApiResponseError(error_message(payload), status_code=status_code, payload=payload)
    return payload


class _ClientBase:
    def __init__(
        self,
        store: CredentialStore,
        *,
        settings_factory: Callable[[], Settings] = get_settings,
        purge_policy: Optional[PurgePolicy] = None,
    ):
        self.store = store
        self._settings_factory = settings_factory
        self._purge_policy = purge_policy
        self._listeners: List[FailureListener] = []

    def subscribe(self, listener: FailureListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: FailureListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _prepare(
        self,
        endpoint: str,
        method: Union[str, HttpMethod],
        body: Any,
        params: Optional[Mapping[str, Any]],
    ) -> Tuple[PreparedCall, PurgePolicy]:
        if not isinstance(endpoint, str) or not endpoint.strip("/ "):
            raise ValueError("endpoint must be a non-empty string")
        if isinstance(method, HttpMethod):
            verb = method
        else:
            try:
                verb = HttpMethod(str(method).upper())
            except ValueError:
                raise ValueError(f"Unsupported HTTP method: {method!r}") from None
        if verb is HttpMethod.GET and body is not None:
            raise ValueError("GET requests cannot carry a body")

        content = json.dumps(body, allow_nan=False).encode("utf-8") if body is not None else None

        settings = self._settings_factory()
        if not settings.api_base_url:
            raise ApiConfigError("API base URL is not configured (set ADMIN_API_BASE_URL)")

        headers = dict(BASE_HEADERS)
        token = self.store.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        call = PreparedCall(
            endpoint=endpoint,
            method=verb.value,
            url=build_url(settings.api_base_url, endpoint),
            headers=headers,
            content=content,
            params=dict(params) if params else None,
            timeout=settings.api_timeout_s,
        )
        return call, self._purge_policy or settings.purge_policy

    def _fail(self, call: PreparedCall, error: ApiError, policy: PurgePolicy,
              on_error: Optional[ErrorHook]) -> None:
        purge = policy is PurgePolicy.ALWAYS or error.status_code in AUTH_FAILURE_STATUSES
        if purge:
            self.store.remove()
        logger.warning(
            "%s %s failed (%s): %s%s",
            call.method,
            call.endpoint,
            error.status_code or "no response",
            error.message,
            "; credential purged" if purge else "",
        )

        if on_error is not None:
            try:
                on_error(error)
            except Exception:
                logger.exception("Error hook for %s %s raised", call.method, call.endpoint)

        event = ApiFailure(endpoint=call.endpoint, method=call.method, error=error, purged=purge)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Failure listener %r raised", listener)


class AsyncApiClient(_ClientBase):
    """
    Non-blocking admin API client.

    Pass ``http`` to reuse a long-lived ``httpx.AsyncClient`` (or one bound to
    a custom transport); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        settings_factory: Callable[[], Settings] = get_settings,
        http: Optional[httpx.AsyncClient] = None,
        purge_policy: Optional[PurgePolicy] = None,
    ):
        super().__init__(store, settings_factory=settings_factory, purge_policy=purge_policy)
        self._http = http

    async def _send(self, call: PreparedCall) -> httpx.Response:
        kwargs = dict(headers=call.headers, content=call.content, params=call.params)
        if self._http is not None:
            return await self._http.request(
                call.method, call.url, timeout=call.timeout, follow_redirects=True, **kwargs
            )
        timeout = httpx.Timeout(call.timeout, connect=min(call.timeout, 5.0))
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            return await client.request(call.method, call.url, **kwargs)

    async def request(
        self,
        endpoint: str,
        method: Union[str, HttpMethod],
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        on_error: Optional[ErrorHook] = None,
    ) -> Any:
        call, policy = self._prepare(endpoint, method, body, params)
        logger.debug("%s %s", call.method, call.url)
        try:
            resp = await self._send(call)
        except httpx.HTTPError as ex:
            err = ApiTransportError(DEFAULT_ERROR_MESSAGE)
            self._fail(call, err, policy, on_error)
            raise err from ex

        try:
            return decode_response(resp.status_code, resp.content)
        except ApiError as err:
            self._fail(call, err, policy, on_error)
            raise


class ApiClient(_ClientBase):
    """Blocking counterpart of AsyncApiClient for synchronous callers."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        settings_factory: Callable[[], Settings] = get_settings,
        session: Optional[requests.Session] = None,
        purge_policy: Optional[PurgePolicy] = None,
    ):
        super().__init__(store, settings_factory=settings_factory, purge_policy=purge_policy)
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        # injected sessions belong to the caller
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(
        self,
        endpoint: str,
        method: Union[str, HttpMethod],
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        on_error: Optional[ErrorHook] = None,
    ) -> Any:
        call, policy = self._prepare(endpoint, method, body, params)
        logger.debug("%s %s", call.method, call.url)
        try:
            resp = self._session.request(
                call.method,
                call.url,
                headers=call.headers,
                data=call.content,
                params=call.params,
                timeout=call.timeout,
            )
        except requests.RequestException as ex:
            err = ApiTransportError(DEFAULT_ERROR_MESSAGE)
            self._fail(call, err, policy, on_error)
            raise err from ex

        try:
            return decode_response(resp.status_code, resp.content)
        except ApiError as err:
            self._fail(call, err, policy, on_error)
            raise
