"""Shared template rendering for pages wrapped in the site layout."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from chirp.application.ports.user_repository_port import UserRecord
from chirp.infrastructure.http.flash import clear_flash, read_flash
from chirp.infrastructure.http.session_guard import SessionGuard

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def build_templates() -> Jinja2Templates:
    """Return the Jinja2 environment for chirp pages."""

    return Jinja2Templates(directory=str(_TEMPLATE_DIR))


def build_shell_context(
    *,
    page_title: str,
    current_user: UserRecord | None,
    flash: str | None = None,
) -> dict[str, Any]:
    """Return layout variables shared by every page."""

    return {
        "page_title": page_title,
        "current_user": current_user,
        "flash": flash,
    }


def render_page(
    templates: Jinja2Templates,
    request: Request,
    *,
    name: str,
    page_title: str,
    current_user: UserRecord | None,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> Response:
    """Render a page with the layout context and consume any pending flash notice."""

    response = templates.TemplateResponse(
        request=request,
        name=name,
        context={
            **build_shell_context(
                page_title=page_title,
                current_user=current_user,
                flash=read_flash(request),
            ),
            **(context or {}),
        },
        status_code=status_code,
    )
    clear_flash(request, response)
    return response


def install_error_pages(app: FastAPI, *, session_guard: SessionGuard) -> None:
    """Render HTTP errors raised by routers with the site layout instead of JSON."""

    templates = build_templates()

    @app.exception_handler(StarletteHTTPException)
    async def render_http_error(request: Request, exc: StarletteHTTPException) -> Response:
        return render_page(
            templates,
            request,
            name="error.html",
            page_title=str(exc.status_code),
            current_user=await session_guard.current_user(request),
            context={"status_code": exc.status_code, "detail": exc.detail},
            status_code=exc.status_code,
        )
