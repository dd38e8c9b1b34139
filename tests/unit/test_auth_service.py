from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from chirp.application.ports.password_hasher_port import MalformedPasswordHashError
from chirp.application.ports.user_repository_port import UserRecord
from chirp.application.services.auth_service import AuthOutcome, AuthService


@dataclass
class FakeUserRepository:
    user: UserRecord | None

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        if self.user is None or self.user.email != email:
            return None
        return self.user


class FakePasswordHasher:
    def __init__(self, *, should_verify: bool, malformed: bool = False) -> None:
        self.should_verify = should_verify
        self.malformed = malformed
        self.verify_calls: list[tuple[str, str]] = []

    def hash_password(self, password: str) -> str:
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.verify_calls.append((password, password_hash))
        if self.malformed:
            raise MalformedPasswordHashError("stored password hash is malformed")
        return self.should_verify


def _user() -> UserRecord:
    now = datetime.now(tz=UTC)
    return UserRecord(
        user_id=1,
        name="Alice",
        email="alice@example.org",
        password_hash="hashed::pw",
        image_name=None,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.asyncio
async def test_authenticate_success_normalizes_email() -> None:
    hasher = FakePasswordHasher(should_verify=True)
    service = AuthService(users=FakeUserRepository(user=_user()), password_hasher=hasher)

    result = await service.authenticate(email=" Alice@Example.org ", password="pw")

    assert result.outcome is AuthOutcome.SUCCESS
    assert result.user is not None
    assert hasher.verify_calls == [("pw", "hashed::pw")]


@pytest.mark.asyncio
async def test_authenticate_wrong_password_is_invalid_credentials() -> None:
    service = AuthService(
        users=FakeUserRepository(user=_user()),
        password_hasher=FakePasswordHasher(should_verify=False),
    )

    result = await service.authenticate(email="alice@example.org", password="nope")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert result.user is None


@pytest.mark.asyncio
async def test_authenticate_unknown_email_skips_verification() -> None:
    hasher = FakePasswordHasher(should_verify=True)
    service = AuthService(users=FakeUserRepository(user=None), password_hasher=hasher)

    result = await service.authenticate(email="ghost@example.org", password="pw")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert hasher.verify_calls == []


@pytest.mark.asyncio
async def test_authenticate_propagates_malformed_hash() -> None:
    service = AuthService(
        users=FakeUserRepository(user=_user()),
        password_hasher=FakePasswordHasher(should_verify=True, malformed=True),
    )

    with pytest.raises(MalformedPasswordHashError):
        await service.authenticate(email="alice@example.org", password="pw")
