"""Opaque session token generation and one-way digest."""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable


def _default_token_factory() -> str:
    return secrets.token_urlsafe(32)


class OpaqueTokenService:
    """Issue random bearer-style tokens and hash them for storage."""

    def __init__(self, *, token_factory: Callable[[], str] = _default_token_factory) -> None:
        self._token_factory = token_factory

    def issue_token(self) -> str:
        return self._token_factory()

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
