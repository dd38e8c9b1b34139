"""Local filesystem storage for accepted avatar images."""

from __future__ import annotations

import asyncio
from pathlib import Path

from chirp.application.ports.avatar_storage_port import AvatarStoragePort


class InvalidAvatarFilenameError(ValueError):
    """Raised when a storage filename would escape the avatar directory."""


class LocalAvatarStorage(AvatarStoragePort):
    """Write avatars into one server-controlled directory served as static files."""

    def __init__(self, *, root: Path, url_prefix: str) -> None:
        self._root = root
        self._url_prefix = "/" + url_prefix.strip("/")

    @property
    def root(self) -> Path:
        return self._root

    async def save(self, *, filename: str, content: bytes) -> str:
        path = self._path(filename)
        await asyncio.to_thread(self._write, path, content)
        return f"{self._url_prefix}/{filename}"

    async def delete(self, *, filename: str) -> None:
        path = self._path(filename)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    def _path(self, filename: str) -> Path:
        if not filename or "/" in filename or "\\" in filename or filename.startswith("."):
            raise InvalidAvatarFilenameError(f"invalid avatar filename: {filename!r}")
        return self._root / filename

    def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            path.write_bytes(content)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
