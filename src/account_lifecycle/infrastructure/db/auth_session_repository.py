"""SQLAlchemy adapter for login-session persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_lifecycle.application.ports.auth_session_repository_port import (
    AuthSessionCreateInput,
    AuthSessionRecord,
    AuthSessionRepositoryPort,
)
from account_lifecycle.infrastructure.db.metadata import auth_sessions


class SqlAlchemyAuthSessionRepository(AuthSessionRepositoryPort):
    """Login-session repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_session(self, payload: AuthSessionCreateInput) -> AuthSessionRecord:
        """Persist a token hash row and return the inserted session record."""

        statement = sa.insert(auth_sessions).values(
            user_id=payload.user_id,
            token_hash=payload.token_hash,
            expires_at=payload.expires_at,
        ).returning(*auth_sessions.c)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()

        row = result.mappings().one()
        return _to_auth_session_record(row)

    async def get_active_by_hash(self, *, token_hash: str) -> AuthSessionRecord | None:
        """Return session by hash when not revoked and not expired."""

        now = datetime.now(tz=UTC)
        statement = sa.select(*auth_sessions.c).where(
            auth_sessions.c.token_hash == token_hash,
            auth_sessions.c.revoked_at.is_(None),
            auth_sessions.c.expires_at > now,
        ).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_auth_session_record(row)

    async def revoke_by_hash(self, *, token_hash: str) -> int:
        """Revoke one non-revoked session."""

        statement = (
            sa.update(auth_sessions)
            .where(
                auth_sessions.c.token_hash == token_hash,
                auth_sessions.c.revoked_at.is_(None),
            )
            .values(revoked_at=sa.text("CURRENT_TIMESTAMP"))
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0)


def _to_auth_session_record(row: sa.RowMapping) -> AuthSessionRecord:
    raw_user_id = row["user_id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return AuthSessionRecord(
        id=int(row["id"]),
        user_id=user_id,
        token_hash=cast(str, row["token_hash"]),
        issued_at=cast(datetime, row["issued_at"]),
        expires_at=cast(datetime, row["expires_at"]),
        revoked_at=cast(datetime | None, row["revoked_at"]),
    )
