"""Submitted form values and outcomes for user account use-cases."""

from __future__ import annotations

from dataclasses import dataclass, field

from chirp.application.ports.post_repository_port import PostRecord
from chirp.application.ports.user_repository_port import UserRecord
from chirp.domain.form_errors import FormError


@dataclass(frozen=True)
class SignupForm:
    """Raw signup form values as entered by the visitor."""

    name: str = ""
    email: str = ""
    password: str = ""


@dataclass(frozen=True)
class ProfileForm:
    """Raw profile edit form values as entered by the account owner."""

    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class AvatarUpload:
    """Uploaded avatar file with its client-declared media type."""

    declared_media_type: str | None
    content: bytes
    client_filename: str | None = None


@dataclass(frozen=True)
class RegistrationResult:
    """Signup outcome: the created user, or errors to re-render the form with."""

    user: UserRecord | None = None
    errors: list[FormError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.user is not None and not self.errors


@dataclass(frozen=True)
class ProfileUpdateResult:
    """Profile update outcome: the updated user, or errors plus the entered values."""

    user: UserRecord | None = None
    errors: list[FormError] = field(default_factory=list)
    submitted: ProfileForm | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None and not self.errors


@dataclass(frozen=True)
class UserProfilePage:
    """User plus the post list for one profile tab."""

    user: UserRecord
    posts: list[PostRecord]
