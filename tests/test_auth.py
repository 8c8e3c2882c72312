import asyncio

import httpx
import pytest

from lecture_pilot.core.config import Settings
from lecture_pilot.core.errors import AuthError
from lecture_pilot.services.auth import (
    DEMO_USER_ID,
    SIGNED_IN,
    SIGNED_OUT,
    DemoAuth,
    SupabaseAuth,
    build_auth_backend,
)

CFG = Settings(supabase_url="https://proj.supabase.co", supabase_anon_key="anon")

USER_JSON = {"id": "uuid-1", "email": "a@b.com", "user_metadata": {"full_name": "Jane"}}
SESSION_JSON = {"access_token": "tok", "refresh_token": "ref", "user": USER_JSON}


def _backend(handler):
    return SupabaseAuth(CFG, transport=httpx.MockTransport(handler))


def test_unconfigured_backend_is_demo():
    backend = build_auth_backend(Settings())
    assert isinstance(backend, DemoAuth)
    assert backend.demo is True


def test_demo_accepts_any_credentials():
    auth = DemoAuth()
    user = asyncio.run(auth.sign_in("x@y.z", "anything"))
    assert user.id == DEMO_USER_ID
    assert asyncio.run(auth.get_session()) == user
    asyncio.run(auth.sign_out())
    assert asyncio.run(auth.get_session()) is None


def test_sign_in_stores_session_and_emits():
    seen = []

    def handler(request):
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        assert request.headers["apikey"] == "anon"
        return httpx.Response(200, json=SESSION_JSON)

    auth = _backend(handler)
    auth.on_auth_state_change(lambda event, user: seen.append(event))
    user = asyncio.run(auth.sign_in("a@b.com", "pw"))

    assert user.id == "uuid-1"
    assert user.name == "Jane"
    assert seen == [SIGNED_IN]


def test_backend_error_message_is_passed_through():
    def handler(request):
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

    with pytest.raises(AuthError) as exc:
        asyncio.run(_backend(handler).sign_in("a@b.com", "bad"))
    assert str(exc.value) == "Invalid login credentials"


def test_sign_up_without_session_returns_user():
    def handler(request):
        assert request.url.path == "/auth/v1/signup"
        return httpx.Response(200, json=USER_JSON)

    auth = _backend(handler)
    user = asyncio.run(auth.sign_up("a@b.com", "pw", "Jane"))
    assert user.email == "a@b.com"
    assert asyncio.run(auth.get_session()) is None


def test_expired_session_emits_signed_out():
    def handler(request):
        if request.url.path == "/auth/v1/token":
            return httpx.Response(200, json=SESSION_JSON)
        return httpx.Response(401, json={"msg": "JWT expired"})

    seen = []
    auth = _backend(handler)
    auth.on_auth_state_change(lambda event, user: seen.append((event, user)))
    asyncio.run(auth.sign_in("a@b.com", "pw"))

    assert asyncio.run(auth.get_session()) is None
    assert seen[-1] == (SIGNED_OUT, None)


def test_sign_out_emits_even_if_remote_fails():
    def handler(request):
        if request.url.path == "/auth/v1/token":
            return httpx.Response(200, json=SESSION_JSON)
        return httpx.Response(500, json={"message": "boom"})

    seen = []
    auth = _backend(handler)
    auth.on_auth_state_change(lambda event, user: seen.append(event))
    asyncio.run(auth.sign_in("a@b.com", "pw"))
    asyncio.run(auth.sign_out())
    assert seen == [SIGNED_IN, SIGNED_OUT]


def test_unsubscribe_stops_notifications():
    def handler(request):
        return httpx.Response(200, json=SESSION_JSON)

    seen = []
    auth = _backend(handler)
    sub = auth.on_auth_state_change(lambda event, user: seen.append(event))
    sub.unsubscribe()
    asyncio.run(auth.sign_in("a@b.com", "pw"))
    assert seen == []


def test_sign_up_with_session_stores_it_without_emitting():
    def handler(request):
        if request.url.path == "/auth/v1/signup":
            return httpx.Response(200, json=SESSION_JSON)
        return httpx.Response(200, json=USER_JSON)

    seen = []
    auth = _backend(handler)
    auth.on_auth_state_change(lambda event, user: seen.append(event))
    user = asyncio.run(auth.sign_up("a@b.com", "pw", "Jane"))

    assert user.id == "uuid-1"
    assert seen == []
    assert asyncio.run(auth.get_session()).id == "uuid-1"
