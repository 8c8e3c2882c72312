from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import httpx

from lecture_pilot.core.config import Settings, settings as default_settings
from lecture_pilot.core.errors import AuthError
from lecture_pilot.schemas import User

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, "User | None"], None]

DEMO_USER_ID = "demo-user-123"
DEMO_USER_NAME = "Demo Student"


class Subscription:
    def __init__(self, listeners: list[AuthListener], listener: AuthListener) -> None:
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class AuthBackend(Protocol):
    demo: bool

    async def sign_up(self, email: str, password: str, name: str | None) -> User | None: ...

    async def sign_in(self, email: str, password: str) -> User: ...

    async def get_session(self) -> User | None: ...

    async def sign_out(self) -> None: ...

    def on_auth_state_change(self, listener: AuthListener) -> Subscription: ...


class _Notifier:
    def __init__(self) -> None:
        self._listeners: list[AuthListener] = []

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self._listeners, listener)

    def _emit(self, event: str, user: User | None) -> None:
        for listener in list(self._listeners):
            listener(event, user)


# ----------------------------
# Demo mode
# ----------------------------

class DemoAuth(_Notifier):
    """Used when no identity backend is configured: every credential is accepted."""

    demo = True

    def __init__(self) -> None:
        super().__init__()
        self._user: User | None = None

    async def sign_up(self, email: str, password: str, name: str | None) -> User:
        self._user = User(id=DEMO_USER_ID, email=email, name=name or DEMO_USER_NAME)
        return self._user

    async def sign_in(self, email: str, password: str) -> User:
        self._user = User(id=DEMO_USER_ID, email=email, name=DEMO_USER_NAME)
        return self._user

    async def get_session(self) -> User | None:
        return self._user

    async def sign_out(self) -> None:
        self._user = None


# ----------------------------
# Supabase (GoTrue REST)
# ----------------------------

@dataclass
class _Session:
    access_token: str
    refresh_token: str | None
    user: User


def _user_from_payload(data: dict[str, Any]) -> User | None:
    if not isinstance(data, dict) or not data.get("id"):
        return None
    meta = data.get("user_metadata") or {}
    return User(
        id=str(data["id"]),
        email=str(data.get("email") or ""),
        name=meta.get("full_name") if isinstance(meta, dict) else None,
    )


def _error_message(r: httpx.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        return r.text or f"Authentication failed (HTTP {r.status_code})"
    if isinstance(data, dict):
        for key in ("msg", "error_description", "message", "error"):
            if data.get(key):
                return str(data[key])
    return f"Authentication failed (HTTP {r.status_code})"


class SupabaseAuth(_Notifier):
    demo = False

    def __init__(self, cfg: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__()
        self.cfg = cfg or default_settings
        if not self.cfg.supabase_configured:
            raise AuthError("SUPABASE_URL / SUPABASE_ANON_KEY are not configured")
        self._base_url = self.cfg.supabase_url.rstrip("/") + "/auth/v1"
        self._transport = transport
        self._session: _Session | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"apikey": self.cfg.supabase_anon_key},
            timeout=self.cfg.http_timeout_sec,
            transport=self._transport,
        )

    async def _post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with self._client() as client:
                r = await client.post(path, **kwargs)
        except httpx.HTTPError as e:
            raise AuthError(f"Could not reach the identity backend: {e}") from e
        if r.is_error:
            raise AuthError(_error_message(r))
        return r.json() if r.content else {}

    def _store_session(self, data: dict[str, Any], *, notify: bool = True) -> User | None:
        user = _user_from_payload(data.get("user") or {})
        token = data.get("access_token")
        if user and token:
            self._session = _Session(access_token=token, refresh_token=data.get("refresh_token"), user=user)
            if notify:
                self._emit(SIGNED_IN, user)
        return user

    async def sign_up(self, email: str, password: str, name: str | None) -> User | None:
        data = await self._post(
            "/signup",
            json={"email": email, "password": password, "data": {"full_name": name}},
        )
        # with email confirmation on, GoTrue returns the bare user and no session.
        # A returned session is stored without a SIGNED_IN push; /auth/continue enters the app.
        if "access_token" in data:
            return self._store_session(data, notify=False)
        return _user_from_payload(data)

    async def sign_in(self, email: str, password: str) -> User:
        data = await self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        user = self._store_session(data)
        if user is None:
            raise AuthError("Unexpected response from the identity backend")
        return user

    async def get_session(self) -> User | None:
        if self._session is None:
            return None
        try:
            async with self._client() as client:
                r = await client.get(
                    "/user",
                    headers={"Authorization": f"Bearer {self._session.access_token}"},
                )
        except httpx.HTTPError as e:
            logger.warning("Session check failed: %s", e)
            return None

        if r.status_code in (401, 403):
            # token expired or revoked
            self._session = None
            self._emit(SIGNED_OUT, None)
            return None
        if r.is_error:
            logger.warning("Session check failed: %s", _error_message(r))
            return None

        user = _user_from_payload(r.json())
        if user:
            self._session.user = user
        return user

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            try:
                await self._post(
                    "/logout",
                    headers={"Authorization": f"Bearer {session.access_token}"},
                )
            except AuthError as e:
                logger.warning("Remote sign-out failed: %s", e)
        self._emit(SIGNED_OUT, None)


def build_auth_backend(cfg: Settings | None = None) -> AuthBackend:
    cfg = cfg or default_settings
    if cfg.supabase_configured:
        return SupabaseAuth(cfg)
    logger.warning("Supabase not configured, using demo mode")
    return DemoAuth()
