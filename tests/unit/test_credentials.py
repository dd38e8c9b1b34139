from __future__ import annotations

from chirp.domain.auth.credentials import (
    EMAIL_BLANK_MESSAGE,
    NAME_BLANK_MESSAGE,
    PASSWORD_BLANK_MESSAGE,
    PASSWORD_TOO_LONG_MESSAGE,
    collect_profile_field_errors,
    collect_signup_field_errors,
    normalize_user_email,
)


def test_normalize_user_email_strips_and_lowercases() -> None:
    assert normalize_user_email(email="  Alice@Example.ORG ") == "alice@example.org"


def test_signup_errors_follow_form_order() -> None:
    errors = collect_signup_field_errors(name="", email=" ", password="")

    assert [(error.param, error.msg) for error in errors] == [
        ("name", NAME_BLANK_MESSAGE),
        ("email", EMAIL_BLANK_MESSAGE),
        ("password", PASSWORD_BLANK_MESSAGE),
    ]
    assert all(error.location == "body" for error in errors)


def test_signup_rejects_password_over_bcrypt_limit() -> None:
    errors = collect_signup_field_errors(name="A", email="a@example.org", password="é" * 37)

    assert [error.msg for error in errors] == [PASSWORD_TOO_LONG_MESSAGE]


def test_profile_errors_keep_entered_value() -> None:
    errors = collect_profile_field_errors(name="Alice", email="")

    assert len(errors) == 1
    assert errors[0].param == "email"
    assert errors[0].value == ""


def test_valid_signup_has_no_errors() -> None:
    assert collect_signup_field_errors(name="Alice", email="a@example.org", password="pw") == []
