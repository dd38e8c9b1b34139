"""FastAPI router for login, logout, and the site root redirect."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from chirp.application.services.auth_service import AuthOutcome, AuthService
from chirp.application.services.session_service import SessionService
from chirp.infrastructure.http.flash import FlashMessage, set_flash
from chirp.infrastructure.http.session_guard import SESSION_COOKIE_NAME, SessionGuard
from chirp.infrastructure.http.shell_context import build_templates, render_page

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
logger = logging.getLogger(__name__)


def build_auth_router(
    *,
    auth_service: AuthService,
    session_service: SessionService,
    session_guard: SessionGuard,
) -> APIRouter:
    """Build router exposing cookie-session login pages."""

    templates = build_templates()
    router = APIRouter(tags=["auth"])

    @router.get("/", response_class=HTMLResponse)
    async def root(request: Request) -> Response:
        user = await session_guard.current_user(request)
        if user is None:
            return RedirectResponse(url="/login", status_code=303)
        return RedirectResponse(url=f"/users/{user.user_id}", status_code=303)

    @router.get("/login", response_class=HTMLResponse)
    async def render_login_page(request: Request) -> Response:
        user = await session_guard.current_user(request)
        if user is not None:
            return RedirectResponse(url=f"/users/{user.user_id}", status_code=303)
        return render_page(
            templates,
            request,
            name="login.html",
            page_title="Log in",
            current_user=None,
            context={"email": "", "error": None},
        )

    @router.post("/login", response_class=HTMLResponse)
    async def submit_login(
        request: Request,
        email: Annotated[str, Form()] = "",
        password: Annotated[str, Form()] = "",
    ) -> Response:
        result = await auth_service.authenticate(email=email, password=password)
        if result.outcome is not AuthOutcome.SUCCESS or result.user is None:
            logger.info("login_failed email=%s", email.strip().lower())
            return render_page(
                templates,
                request,
                name="login.html",
                page_title="Log in",
                current_user=None,
                context={"email": email, "error": INVALID_CREDENTIALS_MESSAGE},
                status_code=401,
            )

        token = await session_service.start_session(user_id=result.user.user_id)
        logger.info("login_succeeded user_id=%s", result.user.user_id)
        response = RedirectResponse(url=f"/users/{result.user.user_id}", status_code=303)
        set_session_cookie(response, token)
        return response

    @router.post("/logout")
    async def logout(request: Request) -> Response:
        await session_service.end_session(token=request.cookies.get(SESSION_COOKIE_NAME))
        response = RedirectResponse(url="/login", status_code=303)
        response.delete_cookie(SESSION_COOKIE_NAME)
        set_flash(response, FlashMessage.SIGNED_OUT)
        return response

    return router


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the opaque session token cookie."""

    response.set_cookie(SESSION_COOKIE_NAME, token, httponly=True, samesite="lax")
