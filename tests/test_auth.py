import pytest

from admin_client.services.auth import AuthService
from admin_client.services.errors import ApiResponseError, AuthenticationError

from conftest import GOOD_OTP, TOKENLESS_OTP

pytestmark = pytest.mark.anyio


@pytest.fixture
def auth(client, store):
    return AuthService(client, store)


async def test_login_then_verify_otp_stores_token(auth, store, backend):
    sent = await auth.login("9800000001", "secret")
    assert sent["message"] == "OTP sent to your email"
    assert not auth.is_authenticated()

    data = await auth.verify_otp("9800000001", GOOD_OTP)

    assert data["token"] == "tok-9800000001"
    assert store.get() == "tok-9800000001"
    assert auth.is_authenticated()
    assert backend.last["body"] == {"username": "9800000001", "userOTP": GOOD_OTP}


async def test_token_used_on_next_call(auth, client, backend):
    await auth.verify_otp("admin", GOOD_OTP)
    backend.reply("GET", "getAllUsers", 200, {"success": True, "data": []})

    await client.request("getAllUsers", "GET")

    assert backend.last["headers"]["authorization"] == "Bearer tok-admin"


async def test_wrong_password_raises_backend_message(auth, backend):
    with pytest.raises(ApiResponseError, match="Invalid credentials"):
        await auth.login("admin", "wrong")
    assert backend.last["path"] == "login"


@pytest.mark.parametrize("otp", ["", "12345", "1234567", "12a456"])
async def test_malformed_otp_rejected_before_request(auth, backend, otp):
    with pytest.raises(ValueError, match="6-digit"):
        await auth.verify_otp("admin", otp)
    assert backend.calls == []


async def test_verify_without_token_is_authentication_error(auth, store):
    with pytest.raises(AuthenticationError, match="Authentication failed"):
        await auth.verify_otp("admin", TOKENLESS_OTP)
    assert store.get() is None


async def test_wrong_otp_purges_existing_session(auth, store):
    store.set("stale")

    with pytest.raises(ApiResponseError, match="Invalid OTP"):
        await auth.verify_otp("admin", "654321")
    assert store.get() is None


async def test_resend_register_and_reset(auth, backend):
    await auth.resend_otp("admin")
    assert (backend.last["path"], backend.last["body"]) == ("auth/resend-otp", {"username": "admin"})

    await auth.register("admin", "admin@example.com", "pw")
    assert backend.last["path"] == "auth/register"
    assert backend.last["body"] == {"username": "admin", "email": "admin@example.com", "password": "pw"}

    await auth.reset_password("admin@example.com")
    assert (backend.last["path"], backend.last["body"]) == ("auth/reset-password", {"email": "admin@example.com"})


async def test_logout_drops_token(auth, store):
    store.set("abc123")
    auth.logout()
    assert store.get() is None
    assert not auth.is_authenticated()
