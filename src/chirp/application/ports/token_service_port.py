"""Port for opaque session token generation and hashing."""

from __future__ import annotations

from typing import Protocol


class TokenServicePort(Protocol):
    """Opaque token contract."""

    def issue_token(self) -> str:
        """Return a new random raw token."""

    def hash_token(self, token: str) -> str:
        """Return the digest stored in place of a raw token."""
