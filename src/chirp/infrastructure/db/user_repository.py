"""SQLAlchemy adapter for user account persistence."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chirp.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserCreateInput,
    UserProfileUpdateInput,
    UserRecord,
    UserRepositoryPort,
)
from chirp.infrastructure.db.metadata import users


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""

        statement = sa.select(*users.c).order_by(users.c.id)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id or None."""

        statement = sa.select(*users.c).where(users.c.id == user_id).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

        statement = sa.select(*users.c).where(users.c.email == email).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row and return it; email conflicts raise DuplicateEmailError."""

        statement = sa.insert(users).values(
            name=payload.name,
            email=payload.email,
            password_hash=payload.password_hash,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().one()
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateEmailError(email=payload.email) from exc

        return _to_user_record(row)

    async def update_profile(self, payload: UserProfileUpdateInput) -> UserRecord | None:
        """Update name/email and optionally the image path; None when the user is missing."""

        values: dict[str, object] = {
            "name": payload.name,
            "email": payload.email,
            "updated_at": sa.text("CURRENT_TIMESTAMP"),
        }
        if payload.image_name is not None:
            values["image_name"] = payload.image_name

        statement = (
            sa.update(users)
            .where(users.c.id == payload.user_id)
            .values(**values)
            .returning(*users.c)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().first()
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateEmailError(email=payload.email) from exc

        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    return UserRecord(
        user_id=int(row["id"]),
        name=cast(str, row["name"]),
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        image_name=cast(str | None, row["image_name"]),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
