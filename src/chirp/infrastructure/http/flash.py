"""One-shot notices carried across a redirect in a short-lived cookie."""

from __future__ import annotations

from enum import StrEnum

from fastapi import Request, Response

FLASH_COOKIE_NAME = "chirp_flash"


class FlashMessage(StrEnum):
    """Known notices; the cookie stores the member name, never free text."""

    SIGNED_UP = "You have signed up successfully"
    PROFILE_UPDATED = "Your account has been updated successfully"
    SIGNED_OUT = "You have signed out"


def set_flash(response: Response, message: FlashMessage) -> None:
    response.set_cookie(FLASH_COOKIE_NAME, message.name, httponly=True, samesite="lax")


def read_flash(request: Request) -> str | None:
    """Return the pending notice text, ignoring unknown cookie values."""

    raw = request.cookies.get(FLASH_COOKIE_NAME)
    if raw is None:
        return None
    try:
        return FlashMessage[raw].value
    except KeyError:
        return None


def clear_flash(request: Request, response: Response) -> None:
    if FLASH_COOKIE_NAME in request.cookies:
        response.delete_cookie(FLASH_COOKIE_NAME)
