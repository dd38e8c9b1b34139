"""Structured field-level validation errors re-displayed on HTML forms."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormError:
    """One field validation failure shown next to the submitted form."""

    param: str
    msg: str
    location: str = "body"
    value: str | None = None
