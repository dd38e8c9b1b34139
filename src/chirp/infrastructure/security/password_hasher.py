"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from chirp.application.ports.password_hasher_port import (
    MalformedPasswordHashError,
    PasswordHasherPort,
    PasswordHashingError,
)

DEFAULT_BCRYPT_ROUNDS = 10
_BCRYPT_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt with a configured cost factor."""

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_password(self, password: str) -> str:
        encoded = _bcrypt_input(password)
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            return bcrypt.hashpw(encoded, salt).decode("utf-8")
        except ValueError as exc:
            raise PasswordHashingError(f"bcrypt hashing failed: {exc}") from exc

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))
        except ValueError as exc:
            raise MalformedPasswordHashError("stored password hash is malformed") from exc


def _bcrypt_input(password: str) -> bytes:
    """Encode the password, keeping only the bytes bcrypt actually digests."""

    return password.encode("utf-8")[:_BCRYPT_MAX_PASSWORD_BYTES]
