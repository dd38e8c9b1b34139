"""Port for user account persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class DuplicateEmailError(ValueError):
    """Raised when a write would store an email already used by another user."""

    def __init__(self, *, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: int
    name: str
    email: str
    password_hash: str
    image_name: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user row."""

    name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class UserProfileUpdateInput:
    """Input payload for updating profile fields; `image_name=None` keeps the stored image."""

    user_id: int
    name: str
    email: str
    image_name: str | None = None


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id or None."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user and return the persisted row."""

    async def update_profile(self, payload: UserProfileUpdateInput) -> UserRecord | None:
        """Update profile fields and return the row, or None when the user is missing."""
