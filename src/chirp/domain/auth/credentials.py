"""Field rules for signup and profile credential inputs."""

from __future__ import annotations

from chirp.domain.form_errors import FormError

# bcrypt only consumes the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

NAME_BLANK_MESSAGE = "Name can't be blank"
EMAIL_BLANK_MESSAGE = "Email can't be blank"
PASSWORD_BLANK_MESSAGE = "Password can't be blank"
PASSWORD_TOO_LONG_MESSAGE = f"Password can't be longer than {MAX_PASSWORD_BYTES} bytes"
EMAIL_TAKEN_MESSAGE = "Email has already been taken"


def normalize_user_email(*, email: str) -> str:
    """Normalize one user email for storage and uniqueness lookups."""

    return email.strip().lower()


def collect_profile_field_errors(*, name: str, email: str) -> list[FormError]:
    """Return blank-field errors for the name and email inputs, in form order."""

    errors: list[FormError] = []
    if not name.strip():
        errors.append(FormError(param="name", msg=NAME_BLANK_MESSAGE, value=name))
    if not email.strip():
        errors.append(FormError(param="email", msg=EMAIL_BLANK_MESSAGE, value=email))
    return errors


def collect_signup_field_errors(*, name: str, email: str, password: str) -> list[FormError]:
    """Return field errors for a signup submission without touching persistence."""

    errors = collect_profile_field_errors(name=name, email=email)
    if not password:
        errors.append(FormError(param="password", msg=PASSWORD_BLANK_MESSAGE))
    elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.append(FormError(param="password", msg=PASSWORD_TOO_LONG_MESSAGE))
    return errors


def email_taken_error(*, email: str) -> FormError:
    """Build the uniqueness error attached to the email field."""

    return FormError(param="email", msg=EMAIL_TAKEN_MESSAGE, value=email)
