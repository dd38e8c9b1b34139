"""Session cookie resolution and access guards for HTML routes."""

from __future__ import annotations

from fastapi import Request

from chirp.application.ports.user_repository_port import UserRecord
from chirp.application.services.session_service import SessionService

SESSION_COOKIE_NAME = "chirp_session"


class NotAuthenticatedError(PermissionError):
    """Raised when a route requires a signed-in user and none is present."""


class NotProfileOwnerError(PermissionError):
    """Raised when a signed-in user acts on another user's profile."""

    def __init__(self, *, user_id: int) -> None:
        super().__init__(f"not allowed to modify user {user_id}")
        self.user_id = user_id


class SessionGuard:
    """Resolve the signed-in user from the session cookie and enforce route access."""

    def __init__(self, *, session_service: SessionService) -> None:
        self._session_service = session_service

    async def current_user(self, request: Request) -> UserRecord | None:
        """Return the signed-in user or None for anonymous visitors."""

        return await self._session_service.resolve_user(
            token=request.cookies.get(SESSION_COOKIE_NAME),
        )

    async def require_user(self, request: Request) -> UserRecord:
        """Return the signed-in user or raise NotAuthenticatedError."""

        user = await self.current_user(request)
        if user is None:
            raise NotAuthenticatedError("sign in required")
        return user

    async def require_owner(self, request: Request, *, user_id: int) -> UserRecord:
        """Return the signed-in user when they own `user_id`."""

        user = await self.require_user(request)
        if user.user_id != user_id:
            raise NotProfileOwnerError(user_id=user_id)
        return user
