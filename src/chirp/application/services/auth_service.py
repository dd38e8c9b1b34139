"""Application authentication service for credential verification."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum

from chirp.application.ports.password_hasher_port import PasswordHasherPort
from chirp.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from chirp.domain.auth.credentials import normalize_user_email


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model."""

    outcome: AuthOutcome
    user: UserRecord | None = None


class AuthService:
    """Authenticate login form credentials against stored password hashes."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    async def authenticate(self, *, email: str, password: str) -> AuthResult:
        """Return the matching user when email and password verify.

        A malformed stored hash propagates as `MalformedPasswordHashError`.
        """

        normalized_email = normalize_user_email(email=email)
        if not normalized_email or not password:
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        user = await self._users.get_by_email(email=normalized_email)
        if user is None:
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        is_valid = await asyncio.to_thread(
            self._password_hasher.verify_password,
            password=password,
            password_hash=user.password_hash,
        )
        if not is_valid:
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)
