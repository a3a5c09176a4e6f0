"""Port for opaque login-session token persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class AuthSessionCreateInput:
    """Input payload for inserting a login-session record."""

    user_id: UUID
    token_hash: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthSessionRecord:
    """Persisted login-session model."""

    id: int
    user_id: UUID
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None


class AuthSessionRepositoryPort(Protocol):
    """Login-session persistence contract."""

    async def create_session(self, payload: AuthSessionCreateInput) -> AuthSessionRecord:
        """Persist a new session record."""

    async def get_active_by_hash(self, *, token_hash: str) -> AuthSessionRecord | None:
        """Return session by hash when not revoked and not expired."""

    async def revoke_by_hash(self, *, token_hash: str) -> int:
        """Revoke one session by token hash and return affected count."""
