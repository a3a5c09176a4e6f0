"""Port for account persistence used by lifecycle workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class UserCreateInput:
    """Account payload handed to the store; carries only the hashed credential."""

    email: str
    username: str
    password_hash: str


@dataclass(frozen=True)
class UserRecord:
    """Persisted account model."""

    user_id: UUID
    email: str
    username: str
    password_hash: str
    created_at: datetime


class UserRepositoryPort(Protocol):
    """User store contract."""

    async def add_user(self, payload: UserCreateInput) -> UserRecord:
        """Persist one new account and return the stored record."""

    async def remove_user(self, *, user_id: UUID) -> None:
        """Delete one account by id."""

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return account by id or None."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return account by email or None."""
