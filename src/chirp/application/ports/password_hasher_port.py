"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHashingError(RuntimeError):
    """Raised when the hashing primitive itself fails."""


class MalformedPasswordHashError(PasswordHashingError):
    """Raised when a stored password hash cannot be parsed."""


class PasswordHasherPort(Protocol):
    """Password hashing/verification contract.

    Implementations are CPU-bound and blocking; async callers offload them to a worker thread.
    """

    def hash_password(self, password: str) -> str:
        """Hash plaintext password for storage with a fresh random salt."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against stored hash."""
