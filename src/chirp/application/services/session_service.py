"""Application service for browser session tokens."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from chirp.application.ports.auth_token_repository_port import (
    AuthTokenCreateInput,
    AuthTokenRepositoryPort,
)
from chirp.application.ports.token_service_port import TokenServicePort
from chirp.application.ports.user_repository_port import UserRecord, UserRepositoryPort


class SessionService:
    """Issue, resolve, and revoke opaque session tokens stored as hashes."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_tokens: AuthTokenRepositoryPort,
        token_service: TokenServicePort,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self._users = users
        self._auth_tokens = auth_tokens
        self._token_service = token_service
        self._ttl = ttl
        self._clock = clock

    async def start_session(self, *, user_id: int) -> str:
        """Persist a new token hash for the user and return the raw token."""

        token = self._token_service.issue_token()
        await self._auth_tokens.create_token(
            AuthTokenCreateInput(
                user_id=user_id,
                token_hash=self._token_service.hash_token(token),
                expires_at=self._clock() + self._ttl,
            )
        )
        return token

    async def resolve_user(self, *, token: str | None) -> UserRecord | None:
        """Return the user owning an active token, or None."""

        if not token:
            return None
        record = await self._auth_tokens.get_active_by_hash(
            token_hash=self._token_service.hash_token(token),
        )
        if record is None:
            return None
        return await self._users.get_by_id(user_id=record.user_id)

    async def end_session(self, *, token: str | None) -> None:
        """Revoke the token if present."""

        if not token:
            return
        await self._auth_tokens.revoke_token(token_hash=self._token_service.hash_token(token))
