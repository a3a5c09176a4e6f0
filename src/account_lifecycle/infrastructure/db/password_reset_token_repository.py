"""SQLAlchemy adapter for the password-reset token store."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_lifecycle.application.ports.password_reset_token_repository_port import (
    PasswordResetTokenRecord,
    PasswordResetTokenRepositoryPort,
)
from account_lifecycle.domain.account.password_reset_token import PasswordResetToken
from account_lifecycle.infrastructure.db.metadata import password_reset_tokens
from account_lifecycle.infrastructure.security.token_service import hash_opaque_token


class SqlAlchemyPasswordResetTokenRepository(PasswordResetTokenRepositoryPort):
    """Reset token repository storing token hashes only."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add_token(self, token: PasswordResetToken) -> None:
        statement = sa.insert(password_reset_tokens).values(
            email=token.email,
            token_hash=hash_opaque_token(token.token),
            issued_at=token.issued_at,
            expires_at=token.expires_at,
        )

        async with self._session_factory() as session:
            await session.execute(statement)
            await session.commit()

    async def list_by_email(self, *, email: str) -> list[PasswordResetTokenRecord]:
        statement = (
            sa.select(*password_reset_tokens.c)
            .where(password_reset_tokens.c.email == email)
            .order_by(password_reset_tokens.c.id)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_reset_token_record(row) for row in result.mappings().all()]

    async def remove_by_email(self, *, email: str) -> int:
        statement = sa.delete(password_reset_tokens).where(password_reset_tokens.c.email == email)

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0)


def _to_reset_token_record(row: sa.RowMapping) -> PasswordResetTokenRecord:
    return PasswordResetTokenRecord(
        id=int(row["id"]),
        email=cast(str, row["email"]),
        token_hash=cast(str, row["token_hash"]),
        issued_at=cast(datetime, row["issued_at"]),
        expires_at=cast(datetime, row["expires_at"]),
    )
