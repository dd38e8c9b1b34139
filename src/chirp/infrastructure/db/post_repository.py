"""SQLAlchemy adapter for profile post listings."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chirp.application.ports.post_repository_port import (
    PostAuthor,
    PostRecord,
    PostRepositoryPort,
)
from chirp.infrastructure.db.metadata import likes, posts, users

_POST_COLUMNS = (
    posts.c.id.label("post_id"),
    posts.c.content,
    posts.c.created_at,
    users.c.id.label("author_id"),
    users.c.name.label("author_name"),
    users.c.image_name.label("author_image_name"),
)


class SqlAlchemyPostRepository(PostRepositoryPort):
    """Post queries backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_by_user(self, *, user_id: int) -> list[PostRecord]:
        """Return posts written by one user, newest first."""

        statement = (
            sa.select(*_POST_COLUMNS)
            .select_from(posts.join(users, users.c.id == posts.c.user_id))
            .where(posts.c.user_id == user_id)
            .order_by(posts.c.created_at.desc(), posts.c.id.desc())
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_post_record(row) for row in result.mappings().all()]

    async def list_liked_by_user(self, *, user_id: int) -> list[PostRecord]:
        """Return posts liked by one user, most recently liked first."""

        statement = (
            sa.select(*_POST_COLUMNS)
            .select_from(
                likes.join(posts, posts.c.id == likes.c.post_id).join(
                    users,
                    users.c.id == posts.c.user_id,
                )
            )
            .where(likes.c.user_id == user_id)
            .order_by(likes.c.created_at.desc(), likes.c.id.desc())
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_post_record(row) for row in result.mappings().all()]


def _to_post_record(row: sa.RowMapping) -> PostRecord:
    return PostRecord(
        post_id=int(row["post_id"]),
        content=cast(str, row["content"]),
        created_at=cast(datetime, row["created_at"]),
        author=PostAuthor(
            user_id=int(row["author_id"]),
            name=cast(str, row["author_name"]),
            image_name=cast(str | None, row["author_image_name"]),
        ),
    )
