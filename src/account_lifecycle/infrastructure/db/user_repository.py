"""SQLAlchemy adapter for the account store."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_lifecycle.application.ports.capability_errors import (
    UserAlreadyExistsError,
    UserNotFoundError,
)
from account_lifecycle.application.ports.user_repository_port import (
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from account_lifecycle.infrastructure.db.metadata import users


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one account row; duplicate emails raise `UserAlreadyExistsError`."""

        statement = sa.insert(users).values(
            id=uuid4(),
            email=payload.email,
            username=payload.username,
            password_hash=payload.password_hash,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                raise UserAlreadyExistsError(email=payload.email) from error

        row = result.mappings().one()
        return _to_user_record(row)

    async def remove_user(self, *, user_id: UUID) -> None:
        """Delete one account row; unknown ids raise `UserNotFoundError`."""

        statement = sa.delete(users).where(users.c.id == user_id)

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        if not result.rowcount:
            raise UserNotFoundError(user_id=user_id)

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return account by id."""

        return await self._fetch_one(users.c.id == user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return account by exact, case-sensitive email."""

        return await self._fetch_one(users.c.email == email)

    async def _fetch_one(self, criterion: sa.ColumnElement[bool]) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(sa.select(*users.c).where(criterion).limit(1))

        row = result.mappings().first()
        return None if row is None else _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        email=cast(str, row["email"]),
        username=cast(str, row["username"]),
        password_hash=cast(str, row["password_hash"]),
        created_at=cast(datetime, row["created_at"]),
    )
