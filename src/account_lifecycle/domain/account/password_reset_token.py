"""Password-reset token value and issuance rules."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

_TOKEN_BYTES = 32


@dataclass(frozen=True)
class PasswordResetToken:
    """One outstanding password-reset token for an email address.

    Tokens only move from issued to expired; nothing retires a token after use
    and reissuing does not supersede earlier tokens unless the caller removes them.
    """

    email: str
    token: str
    issued_at: datetime
    expires_at: datetime


def generate_reset_token_value() -> str:
    """Return an unguessable URL-safe token string."""

    return secrets.token_urlsafe(_TOKEN_BYTES)


def issue_password_reset_token(
    *,
    email: str,
    ttl_minutes: int,
    now: Callable[[], datetime] | None = None,
    token_factory: Callable[[], str] | None = None,
) -> PasswordResetToken:
    """Build a fresh token expiring exactly `ttl_minutes` after issuance."""

    if ttl_minutes <= 0:
        raise ValueError("ttl_minutes must be positive")

    issued_at = (now or _utc_now)()
    token = (token_factory or generate_reset_token_value)()
    if not token:
        raise ValueError("token factory returned an empty token")

    return PasswordResetToken(
        email=email,
        token=token,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(minutes=ttl_minutes),
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)
