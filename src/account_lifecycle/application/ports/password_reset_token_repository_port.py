"""Port for outstanding password-reset token persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from account_lifecycle.domain.account.password_reset_token import PasswordResetToken


@dataclass(frozen=True)
class PasswordResetTokenRecord:
    """Persisted reset token model; the raw token value is never stored."""

    id: int
    email: str
    token_hash: str
    issued_at: datetime
    expires_at: datetime


class PasswordResetTokenRepositoryPort(Protocol):
    """Token store contract keyed by email address."""

    async def add_token(self, token: PasswordResetToken) -> None:
        """Persist one newly issued token."""

    async def list_by_email(self, *, email: str) -> list[PasswordResetTokenRecord]:
        """Return every stored token for one email, oldest first."""

    async def remove_by_email(self, *, email: str) -> int:
        """Delete every stored token for one email and return affected count."""
