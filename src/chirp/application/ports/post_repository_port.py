"""Port for read-side post queries shown on user profile pages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class PostAuthor:
    """Author fields rendered next to a post."""

    user_id: int
    name: str
    image_name: str | None


@dataclass(frozen=True)
class PostRecord:
    """Post row joined with its author."""

    post_id: int
    content: str
    created_at: datetime
    author: PostAuthor


class PostRepositoryPort(Protocol):
    """Post query contract."""

    async def list_by_user(self, *, user_id: int) -> list[PostRecord]:
        """Return posts written by one user, newest first."""

    async def list_liked_by_user(self, *, user_id: int) -> list[PostRecord]:
        """Return posts liked by one user, most recently liked first."""
