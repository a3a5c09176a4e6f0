from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi import Response

from account_lifecycle.application.ports.auth_session_repository_port import (
    AuthSessionCreateInput,
    AuthSessionRecord,
)
from account_lifecycle.application.ports.user_repository_port import UserCreateInput, UserRecord
from account_lifecycle.infrastructure.http.cookie_session_service import CookieSessionService
from account_lifecycle.infrastructure.http.web_session import SESSION_COOKIE_NAME, WebSession
from account_lifecycle.infrastructure.security.token_service import (
    OpaqueTokenService,
    hash_opaque_token,
)

FIXED_NOW = datetime(2026, 2, 15, 9, 0, tzinfo=UTC)


def _make_user() -> UserRecord:
    return UserRecord(
        user_id=uuid4(),
        email="a@b.com",
        username="a@b.com",
        password_hash="hashed",
        created_at=FIXED_NOW,
    )


class FakeUserRepository:
    def __init__(self, users: list[UserRecord]) -> None:
        self.users = {user.user_id: user for user in users}

    async def add_user(self, payload: UserCreateInput) -> UserRecord:
        raise AssertionError(f"unexpected add_user({payload})")

    async def remove_user(self, *, user_id: UUID) -> None:
        raise AssertionError(f"unexpected remove_user({user_id})")

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        _ = email
        return None


class FakeAuthSessionRepository:
    def __init__(self) -> None:
        self.sessions: dict[str, AuthSessionRecord] = {}

    async def create_session(self, payload: AuthSessionCreateInput) -> AuthSessionRecord:
        record = AuthSessionRecord(
            id=len(self.sessions) + 1,
            user_id=payload.user_id,
            token_hash=payload.token_hash,
            issued_at=FIXED_NOW,
            expires_at=payload.expires_at,
            revoked_at=None,
        )
        self.sessions[payload.token_hash] = record
        return record

    async def get_active_by_hash(self, *, token_hash: str) -> AuthSessionRecord | None:
        record = self.sessions.get(token_hash)
        if record is None or record.revoked_at is not None:
            return None
        return record

    async def revoke_by_hash(self, *, token_hash: str) -> int:
        record = self.sessions.get(token_hash)
        if record is None or record.revoked_at is not None:
            return 0
        self.sessions[token_hash] = AuthSessionRecord(
            id=record.id,
            user_id=record.user_id,
            token_hash=record.token_hash,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            revoked_at=FIXED_NOW,
        )
        return 1


def _build(
    users: list[UserRecord],
    *,
    cookie_secure: bool = False,
) -> tuple[CookieSessionService, FakeAuthSessionRepository]:
    auth_sessions = FakeAuthSessionRepository()
    service = CookieSessionService(
        users=FakeUserRepository(users),
        auth_sessions=auth_sessions,
        token_service=OpaqueTokenService(
            token_ttl=timedelta(hours=12),
            token_factory=lambda: "session-token",
            now=lambda: FIXED_NOW,
        ),
        cookie_secure=cookie_secure,
    )
    return service, auth_sessions


@pytest.mark.asyncio
async def test_login_persists_token_hash_and_sets_http_only_cookie() -> None:
    user = _make_user()
    service, auth_sessions = _build([user], cookie_secure=True)
    web_session = WebSession(incoming_token=None)

    await service.mark_logged_in_after_authentication(web_session, user)
    response = service.write_cookie(web_session, Response())

    assert list(auth_sessions.sessions) == [hash_opaque_token("session-token")]
    stored = auth_sessions.sessions[hash_opaque_token("session-token")]
    assert stored.user_id == user.user_id
    assert stored.expires_at == FIXED_NOW + timedelta(hours=12)
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{SESSION_COOKIE_NAME}=session-token")
    assert "HttpOnly" in cookie
    assert "Secure" in cookie
    assert "samesite=lax" in cookie.lower()


@pytest.mark.asyncio
async def test_is_authenticated_resolves_user_for_active_session_only() -> None:
    user = _make_user()
    service, _ = _build([user])
    await service.mark_logged_in_after_authentication(WebSession(incoming_token=None), user)

    assert await service.is_authenticated(WebSession(incoming_token="session-token")) == user
    assert await service.is_authenticated(WebSession(incoming_token="other-token")) is None
    assert await service.is_authenticated(WebSession(incoming_token=None)) is None


@pytest.mark.asyncio
async def test_log_out_revokes_session_and_clears_cookie() -> None:
    user = _make_user()
    service, auth_sessions = _build([user])
    await service.mark_logged_in_after_authentication(WebSession(incoming_token=None), user)
    web_session = WebSession(incoming_token="session-token")

    await service.log_out(web_session, user)
    response = service.write_cookie(web_session, Response())

    assert auth_sessions.sessions[hash_opaque_token("session-token")].revoked_at == FIXED_NOW
    assert await service.is_authenticated(WebSession(incoming_token="session-token")) is None
    assert web_session.cleared is True
    assert response.headers["set-cookie"].startswith(f'{SESSION_COOKIE_NAME}=""')


def test_write_cookie_leaves_response_untouched_without_session_change() -> None:
    service, _ = _build([])

    response = service.write_cookie(WebSession(incoming_token="kept"), Response())

    assert "set-cookie" not in response.headers


def test_unauthenticated_response_is_401_json() -> None:
    service, _ = _build([])

    response = service.unauthenticated_response()

    assert response.status_code == 401
    assert json.loads(response.body) == {"detail": "authentication required"}
