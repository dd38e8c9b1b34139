"""Avatar upload media-type gate and storage filename generation."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

UPLOAD_REJECTED_MESSAGE = "Only image files in png or jpeg format can be uploaded"
_ACCEPTED_TOP_LEVEL_TYPE = "image"


class AcceptableImageSubtype(StrEnum):
    """Closed set of image subtypes accepted for avatar uploads."""

    PNG = "png"
    JPEG = "jpeg"


class UnsupportedMediaTypeError(ValueError):
    """Raised when a declared upload media type is outside the accepted image set."""

    def __init__(self, *, media_type: str | None, reason: str) -> None:
        super().__init__(reason)
        self.media_type = media_type
        self.reason = reason


@dataclass(frozen=True)
class AcceptedMediaType:
    """Declared media type that passed classification."""

    subtype: AcceptableImageSubtype

    @property
    def mime_type(self) -> str:
        return f"{_ACCEPTED_TOP_LEVEL_TYPE}/{self.subtype.value}"

    @property
    def extension(self) -> str:
        return self.subtype.value


def classify_media_type(declared_media_type: str | None) -> AcceptedMediaType:
    """Accept only `image/<subtype>` values whose subtype is in the closed allow-list."""

    if declared_media_type is None:
        raise UnsupportedMediaTypeError(media_type=None, reason=UPLOAD_REJECTED_MESSAGE)

    # Parameters such as "; charset=..." do not change the media type.
    essence = declared_media_type.split(";", 1)[0].strip().lower()
    media_type, separator, media_subtype = essence.partition("/")
    if not separator or not media_type or not media_subtype or "/" in media_subtype:
        raise UnsupportedMediaTypeError(
            media_type=declared_media_type,
            reason=UPLOAD_REJECTED_MESSAGE,
        )
    if media_type != _ACCEPTED_TOP_LEVEL_TYPE:
        raise UnsupportedMediaTypeError(
            media_type=declared_media_type,
            reason=UPLOAD_REJECTED_MESSAGE,
        )

    try:
        subtype = AcceptableImageSubtype(media_subtype)
    except ValueError as exc:
        raise UnsupportedMediaTypeError(
            media_type=declared_media_type,
            reason=UPLOAD_REJECTED_MESSAGE,
        ) from exc
    return AcceptedMediaType(subtype=subtype)


def generate_upload_id() -> str:
    """Return a short url-safe random identifier."""

    return secrets.token_urlsafe(15)


def avatar_filename(
    accepted: AcceptedMediaType,
    *,
    id_factory: Callable[[], str] = generate_upload_id,
) -> str:
    """Build a storage filename independent of any client-supplied name."""

    return f"{id_factory()}.{accepted.extension}"
