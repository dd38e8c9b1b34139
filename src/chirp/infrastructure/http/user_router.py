"""FastAPI router for server-rendered user account pages."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from chirp.application.dto.user_forms import AvatarUpload, ProfileForm, SignupForm
from chirp.application.ports.user_repository_port import UserRecord
from chirp.application.services.session_service import SessionService
from chirp.application.services.user_account_service import (
    UserAccountService,
    UserNotFoundError,
)
from chirp.infrastructure.http.auth_router import set_session_cookie
from chirp.infrastructure.http.flash import FlashMessage, set_flash
from chirp.infrastructure.http.session_guard import (
    NotAuthenticatedError,
    NotProfileOwnerError,
    SessionGuard,
)
from chirp.infrastructure.http.shell_context import build_templates, render_page


def build_user_router(
    *,
    user_service: UserAccountService,
    session_service: SessionService,
    session_guard: SessionGuard,
) -> APIRouter:
    """Build router exposing signup, profile, likes, and profile edit pages."""

    templates = build_templates()
    router = APIRouter(tags=["users"])

    @router.get("/users", response_class=HTMLResponse)
    async def render_user_list_page(request: Request) -> Response:
        """Render every registered user."""

        current_user = await _require_signed_in(session_guard, request)
        if isinstance(current_user, RedirectResponse):
            return current_user

        users = await user_service.list_users()
        return render_page(
            templates,
            request,
            name="users/index.html",
            page_title="Users",
            current_user=current_user,
            context={"users": users},
        )

    @router.get("/signup", response_class=HTMLResponse)
    async def render_signup_page(request: Request) -> Response:
        """Render the empty signup form for anonymous visitors."""

        current_user = await session_guard.current_user(request)
        if current_user is not None:
            return _redirect_to_profile(current_user.user_id)

        return render_page(
            templates,
            request,
            name="users/new.html",
            page_title="Sign up",
            current_user=None,
            context={"user": SignupForm(), "errors": []},
        )

    @router.post("/users", response_class=HTMLResponse)
    async def create_user(
        request: Request,
        name: Annotated[str, Form()] = "",
        email: Annotated[str, Form()] = "",
        password: Annotated[str, Form()] = "",
    ) -> Response:
        """Register an account, sign it in, and redirect to its profile."""

        current_user = await session_guard.current_user(request)
        if current_user is not None:
            return _redirect_to_profile(current_user.user_id)

        form = SignupForm(name=name, email=email, password=password)
        result = await user_service.register(form)
        if not result.ok or result.user is None:
            return render_page(
                templates,
                request,
                name="users/new.html",
                page_title="Sign up",
                current_user=None,
                context={"user": form, "errors": result.errors},
            )

        token = await session_service.start_session(user_id=result.user.user_id)
        response = _redirect_to_profile(result.user.user_id)
        set_session_cookie(response, token)
        set_flash(response, FlashMessage.SIGNED_UP)
        return response

    @router.get("/users/{user_id}", response_class=HTMLResponse)
    async def render_user_page(request: Request, user_id: int) -> Response:
        """Render one user's profile with the posts they wrote."""

        current_user = await _require_signed_in(session_guard, request)
        if isinstance(current_user, RedirectResponse):
            return current_user

        try:
            page = await user_service.get_profile(user_id=user_id)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail="user not found") from exc

        return render_page(
            templates,
            request,
            name="users/show.html",
            page_title=page.user.name,
            current_user=current_user,
            context={"user": page.user, "posts": page.posts, "active_tab": "posts"},
        )

    @router.get("/users/{user_id}/likes", response_class=HTMLResponse)
    async def render_user_likes_page(request: Request, user_id: int) -> Response:
        """Render one user's profile with the posts they liked."""

        current_user = await _require_signed_in(session_guard, request)
        if isinstance(current_user, RedirectResponse):
            return current_user

        try:
            page = await user_service.get_likes(user_id=user_id)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail="user not found") from exc

        return render_page(
            templates,
            request,
            name="users/show.html",
            page_title=page.user.name,
            current_user=current_user,
            context={"user": page.user, "posts": page.posts, "active_tab": "likes"},
        )

    @router.get("/users/{user_id}/edit", response_class=HTMLResponse)
    async def render_user_edit_page(request: Request, user_id: int) -> Response:
        """Render the profile edit form for its owner."""

        current_user = await _require_owner(session_guard, request, user_id=user_id)
        if isinstance(current_user, RedirectResponse):
            return current_user

        try:
            user = await user_service.get_user(user_id=user_id)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail="user not found") from exc

        return render_page(
            templates,
            request,
            name="users/edit.html",
            page_title="Edit profile",
            current_user=current_user,
            context={
                "user": {"id": user.user_id, "name": user.name, "email": user.email},
                "errors": [],
            },
        )

    @router.api_route("/users/{user_id}", methods=["PATCH", "POST"], response_class=HTMLResponse)
    async def update_user(
        request: Request,
        user_id: int,
        name: Annotated[str, Form()] = "",
        email: Annotated[str, Form()] = "",
        image: Annotated[UploadFile | None, File()] = None,
    ) -> Response:
        """Apply a multipart profile update submitted from the edit form."""

        current_user = await _require_owner(session_guard, request, user_id=user_id)
        if isinstance(current_user, RedirectResponse):
            return current_user

        form = ProfileForm(name=name, email=email)
        upload = await _read_upload(image)

        try:
            result = await user_service.update_profile(user_id=user_id, form=form, upload=upload)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail="user not found") from exc

        if not result.ok:
            return render_page(
                templates,
                request,
                name="users/edit.html",
                page_title="Edit profile",
                current_user=current_user,
                context={
                    "user": {"id": user_id, "name": form.name, "email": form.email},
                    "errors": result.errors,
                },
            )

        response = _redirect_to_profile(user_id)
        set_flash(response, FlashMessage.PROFILE_UPDATED)
        return response

    return router


async def _read_upload(image: UploadFile | None) -> AvatarUpload | None:
    """Return the submitted avatar, treating an empty file field as no upload."""

    if image is None or not image.filename:
        return None
    try:
        content = await image.read()
    finally:
        await image.close()
    return AvatarUpload(
        declared_media_type=image.content_type,
        content=content,
        client_filename=image.filename,
    )


def _redirect_to_profile(user_id: int) -> RedirectResponse:
    return RedirectResponse(url=f"/users/{user_id}", status_code=303)


async def _require_signed_in(
    session_guard: SessionGuard,
    request: Request,
) -> UserRecord | RedirectResponse:
    """Resolve signed-in user or redirect anonymous visitors to login."""

    try:
        return await session_guard.require_user(request)
    except NotAuthenticatedError:
        return RedirectResponse(url="/login", status_code=303)


async def _require_owner(
    session_guard: SessionGuard,
    request: Request,
    *,
    user_id: int,
) -> UserRecord | RedirectResponse:
    """Resolve signed-in profile owner, redirecting anonymous visitors and rejecting others."""

    try:
        return await session_guard.require_owner(request, user_id=user_id)
    except NotAuthenticatedError:
        return RedirectResponse(url="/login", status_code=303)
    except NotProfileOwnerError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
