"""Port for persisting accepted avatar image files."""

from __future__ import annotations

from typing import Protocol


class AvatarStoragePort(Protocol):
    """Server-controlled avatar file storage contract."""

    async def save(self, *, filename: str, content: bytes) -> str:
        """Store file content under a generated name and return its public path."""

    async def delete(self, *, filename: str) -> None:
        """Remove a stored file if it exists."""
