"""SQLAlchemy adapter for opaque session token persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chirp.application.ports.auth_token_repository_port import (
    AuthTokenCreateInput,
    AuthTokenRecord,
    AuthTokenRepositoryPort,
)
from chirp.infrastructure.db.metadata import auth_tokens


class SqlAlchemyAuthTokenRepository(AuthTokenRepositoryPort):
    """Session token repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_token(self, payload: AuthTokenCreateInput) -> AuthTokenRecord:
        """Persist a token hash row and return the inserted token record."""

        statement = sa.insert(auth_tokens).values(
            user_id=payload.user_id,
            token_hash=payload.token_hash,
            expires_at=payload.expires_at,
        ).returning(*auth_tokens.c)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            row = result.mappings().one()
            await session.commit()

        return _to_auth_token_record(row)

    async def get_active_by_hash(self, *, token_hash: str) -> AuthTokenRecord | None:
        """Return active token by hash when not revoked and not expired."""

        now = datetime.now(tz=UTC)
        statement = sa.select(*auth_tokens.c).where(
            auth_tokens.c.token_hash == token_hash,
            auth_tokens.c.revoked_at.is_(None),
            auth_tokens.c.expires_at > now,
        ).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_auth_token_record(row)

    async def revoke_token(self, *, token_hash: str) -> bool:
        """Revoke one non-revoked token by hash."""

        statement = (
            sa.update(auth_tokens)
            .where(
                auth_tokens.c.token_hash == token_hash,
                auth_tokens.c.revoked_at.is_(None),
            )
            .values(revoked_at=sa.text("CURRENT_TIMESTAMP"))
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return bool(result.rowcount)


def _to_auth_token_record(row: sa.RowMapping) -> AuthTokenRecord:
    return AuthTokenRecord(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        token_hash=cast(str, row["token_hash"]),
        issued_at=cast(datetime, row["issued_at"]),
        expires_at=cast(datetime, row["expires_at"]),
        revoked_at=cast(datetime | None, row["revoked_at"]),
        last_used_at=cast(datetime | None, row["last_used_at"]),
    )
