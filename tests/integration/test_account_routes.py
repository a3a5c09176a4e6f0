from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest
import sqlalchemy as sa
from alembic.config import Config
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from account_lifecycle.application.ports.capability_errors import UserNotFoundError
from account_lifecycle.application.ports.user_repository_port import UserRecord
from account_lifecycle.application.services.lifecycle_options import AccountLifecycleOptions
from account_lifecycle.infrastructure.db.user_repository import SqlAlchemyUserRepository
from account_lifecycle.infrastructure.http.outcome_handlers import OutcomeHandlers
from account_lifecycle.infrastructure.http.web_session import SESSION_COOKIE_NAME
from account_lifecycle.infrastructure.security.password_hasher import BcryptPasswordHasher
from account_lifecycle.infrastructure.security.token_service import (
    OpaqueTokenService,
    hash_opaque_token,
)
from alembic import command
from apps.account_api.main import create_app, user_id_of


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


class RecordingNotifier:
    def __init__(self, *, fail_registration: bool = False) -> None:
        self.fail_registration = fail_registration
        self.registration_emails: list[str] = []
        self.reset_emails: list[tuple[str, str]] = []
        self.unregistered_notices: list[str] = []

    async def send_registration_email(self, user: UserRecord) -> None:
        if self.fail_registration:
            raise ConnectionError("smtp relay unreachable")
        self.registration_emails.append(user.email)

    async def send_password_reset_email(self, user: UserRecord, token: str) -> None:
        self.reset_emails.append((user.email, token))

    async def send_password_reset_notification_for_unregistered_email(self, email: str) -> None:
        self.unregistered_notices.append(email)


def _build_client(
    async_url: str,
    notifier: RecordingNotifier,
    *,
    outcome_handlers: OutcomeHandlers | None = None,
) -> TestClient:
    app = create_app(
        database_url=async_url,
        options=AccountLifecycleOptions(user_id_getter=user_id_of),
        notifier=notifier,
        password_hasher=BcryptPasswordHasher(rounds=4),
        token_service=OpaqueTokenService(token_factory=lambda: "session-token"),
        outcome_handlers=outcome_handlers,
        cookie_secure=False,
    )
    return TestClient(app)


def test_register_creates_account_hashes_password_and_starts_session(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "register.db")
    notifier = RecordingNotifier()

    with _build_client(async_url, notifier) as client:
        response = client.post("/register", json={"email": "a@b.com", "password": "secret"})

    assert response.status_code == 201
    user_id = UUID(response.json())
    assert response.cookies.get(SESSION_COOKIE_NAME) == "session-token"
    assert notifier.registration_emails == ["a@b.com"]

    with sa.create_engine(sync_url).connect() as connection:
        user_row = connection.execute(
            sa.text("SELECT username, password_hash FROM users WHERE id = :id"),
            {"id": user_id.hex},
        ).one()
        session_row = connection.execute(
            sa.text("SELECT token_hash FROM auth_sessions WHERE user_id = :id"),
            {"id": user_id.hex},
        ).one()

    assert user_row.username == "a@b.com"
    assert user_row.password_hash != "secret"
    assert BcryptPasswordHasher().verify_password(
        password="secret",
        password_hash=user_row.password_hash,
    )
    assert session_row.token_hash == hash_opaque_token("session-token")


def test_register_accepts_form_encoded_body(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_form.db")

    with _build_client(async_url, RecordingNotifier()) as client:
        response = client.post(
            "/register",
            data={"email": "form@b.com", "password": "secret", "username": "former"},
        )

    assert response.status_code == 201


def test_register_missing_fields_returns_field_errors(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_invalid.db")

    with _build_client(async_url, RecordingNotifier()) as client:
        empty = client.post("/register", json={})
        bad_email = client.post("/register", json={"email": "nope", "password": "secret"})

    assert empty.status_code == 400
    assert empty.json() == {
        "email": "Valid email address required",
        "password": "Password required",
    }
    assert bad_email.status_code == 400
    assert bad_email.json() == {"email": "Valid email address required"}


def test_register_rejects_whitespace_only_password(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_blank_password.db")
    notifier = RecordingNotifier()

    with _build_client(async_url, notifier) as client:
        response = client.post("/register", json={"email": "a@b.com", "password": "   "})

    assert response.status_code == 400
    assert response.json() == {"password": "Password required"}
    assert notifier.registration_emails == []


def test_register_accepts_numeric_password_and_reports_only_bad_fields(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_numeric_password.db")

    with _build_client(async_url, RecordingNotifier()) as client:
        numeric = client.post("/register", json={"email": "a@b.com", "password": 123456})
        nested = client.post(
            "/register",
            json={"email": ["x@b.com"], "password": "secret"},
        )

    assert numeric.status_code == 201
    assert nested.status_code == 400
    assert nested.json() == {"email": "Valid email address required"}


def test_register_duplicate_email_returns_409(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_duplicate.db")
    notifier = RecordingNotifier()

    with _build_client(async_url, notifier) as client:
        first = client.post("/register", json={"email": "a@b.com", "password": "secret"})
        second = client.post("/register", json={"email": "a@b.com", "password": "other"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"detail": "email already registered"}
    assert notifier.registration_emails == ["a@b.com"]


def test_register_succeeds_when_registration_email_fails(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_email_down.db")

    with _build_client(async_url, RecordingNotifier(fail_registration=True)) as client:
        response = client.post("/register", json={"email": "a@b.com", "password": "secret"})

    assert response.status_code == 201
    assert response.cookies.get(SESSION_COOKIE_NAME) == "session-token"


def test_unregister_without_session_returns_401(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "unregister_anonymous.db")

    with _build_client(async_url, RecordingNotifier()) as client:
        response = client.post("/unregister")

    assert response.status_code == 401
    assert response.json() == {"detail": "authentication required"}


def test_unregister_logs_out_and_removes_account(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "unregister.db")

    with _build_client(async_url, RecordingNotifier()) as client:
        registered = client.post("/register", json={"email": "a@b.com", "password": "secret"})
        response = client.post("/unregister")
        client.cookies.set(SESSION_COOKIE_NAME, "session-token")
        repeat = client.post("/unregister")

    assert registered.status_code == 201
    assert response.status_code == 200
    assert repeat.status_code == 401
    with sa.create_engine(sync_url).connect() as connection:
        remaining_users = connection.execute(sa.text("SELECT COUNT(*) FROM users")).scalar_one()
        remaining_sessions = connection.execute(
            sa.text("SELECT COUNT(*) FROM auth_sessions")
        ).scalar_one()
    assert remaining_users == 0
    assert remaining_sessions == 0


def test_unregister_failure_still_clears_session_cookie(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "unregister_failure.db")

    async def fail_remove(self: SqlAlchemyUserRepository, *, user_id: UUID) -> None:
        raise UserNotFoundError(user_id=user_id)

    with _build_client(async_url, RecordingNotifier()) as client:
        registered = client.post("/register", json={"email": "a@b.com", "password": "secret"})
        monkeypatch.setattr(SqlAlchemyUserRepository, "remove_user", fail_remove)
        response = client.post("/unregister")

    user_id = UUID(registered.json())
    assert response.status_code == 404
    assert response.json() == {"detail": f"user not found: {user_id}"}
    assert response.headers["set-cookie"].startswith(f'{SESSION_COOKIE_NAME}=""')
    with sa.create_engine(sync_url).connect() as connection:
        revoked_at = connection.execute(
            sa.text("SELECT revoked_at FROM auth_sessions WHERE user_id = :id"),
            {"id": user_id.hex},
        ).scalar_one()
    assert revoked_at is not None


def test_forgot_password_response_is_identical_for_known_and_unknown_email(
    tmp_path: Path,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "forgot_password.db")
    notifier = RecordingNotifier()

    with _build_client(async_url, notifier) as client:
        client.post("/register", json={"email": "known@b.com", "password": "secret"})
        known = client.post("/forgotpassword", json={"email": "known@b.com"})
        unknown = client.post("/forgotpassword", json={"email": "ghost@b.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.text == "Password reset email sent to: known@b.com"
    assert unknown.text == "Password reset email sent to: ghost@b.com"
    assert known.headers["content-type"] == unknown.headers["content-type"]
    assert [email for email, _ in notifier.reset_emails] == ["known@b.com"]
    assert notifier.unregistered_notices == ["ghost@b.com"]

    _, token = notifier.reset_emails[0]
    with sa.create_engine(sync_url).connect() as connection:
        rows = connection.execute(
            sa.text("SELECT email, token_hash FROM password_reset_tokens")
        ).all()
    assert [(row.email, row.token_hash) for row in rows] == [
        ("known@b.com", hash_opaque_token(token))
    ]


@pytest.mark.parametrize("body", [{}, {"email": ""}, {"email": "not-an-email"}])
def test_forgot_password_invalid_email_returns_400(tmp_path: Path, body: dict[str, str]) -> None:
    _, async_url = _upgrade_head(tmp_path, "forgot_password_invalid.db")
    notifier = RecordingNotifier()

    with _build_client(async_url, notifier) as client:
        response = client.post("/forgotpassword", json=body)

    assert response.status_code == 400
    assert response.json() == {"email": "Valid email address required"}
    assert notifier.unregistered_notices == []


def test_outcome_handler_override_replaces_default_response(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "override.db")
    handlers = OutcomeHandlers().with_overrides(
        password_reset_email_sent=lambda email: JSONResponse({"queued": email}, status_code=202),
    )

    with _build_client(async_url, RecordingNotifier(), outcome_handlers=handlers) as client:
        response = client.post("/forgotpassword", json={"email": "ghost@b.com"})

    assert response.status_code == 202
    assert response.json() == {"queued": "ghost@b.com"}
