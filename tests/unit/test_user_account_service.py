from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest

from chirp.application.dto.user_forms import AvatarUpload, ProfileForm, SignupForm
from chirp.application.ports.post_repository_port import PostAuthor, PostRecord
from chirp.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserCreateInput,
    UserProfileUpdateInput,
    UserRecord,
)
from chirp.application.services.user_account_service import (
    UserAccountService,
    UserNotFoundError,
)
from chirp.domain.media import UPLOAD_REJECTED_MESSAGE


def _make_user(
    *,
    user_id: int = 1,
    name: str = "Alice",
    email: str = "alice@example.org",
    password_hash: str = "hashed::pw",
    image_name: str | None = None,
) -> UserRecord:
    now = datetime.now(tz=UTC)
    return UserRecord(
        user_id=user_id,
        name=name,
        email=email,
        password_hash=password_hash,
        image_name=image_name,
        created_at=now,
        updated_at=now,
    )


@dataclass
class FakeUserRepository:
    users: dict[int, UserRecord] = field(default_factory=dict)
    create_payloads: list[UserCreateInput] = field(default_factory=list)
    update_payloads: list[UserProfileUpdateInput] = field(default_factory=list)
    conflict_on_write: bool = False
    vanish_on_update: bool = False

    async def list_users(self) -> list[UserRecord]:
        return [self.users[key] for key in sorted(self.users)]

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        return self.users.get(user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        self.create_payloads.append(payload)
        if self.conflict_on_write:
            raise DuplicateEmailError(email=payload.email)
        user = _make_user(
            user_id=len(self.users) + 1,
            name=payload.name,
            email=payload.email,
            password_hash=payload.password_hash,
        )
        self.users[user.user_id] = user
        return user

    async def update_profile(self, payload: UserProfileUpdateInput) -> UserRecord | None:
        self.update_payloads.append(payload)
        if self.conflict_on_write:
            raise DuplicateEmailError(email=payload.email)
        current = self.users.get(payload.user_id)
        if current is None or self.vanish_on_update:
            return None
        updated = replace(
            current,
            name=payload.name,
            email=payload.email,
            image_name=payload.image_name or current.image_name,
        )
        self.users[payload.user_id] = updated
        return updated


@dataclass
class FakePostRepository:
    authored: dict[int, list[PostRecord]] = field(default_factory=dict)
    liked: dict[int, list[PostRecord]] = field(default_factory=dict)

    async def list_by_user(self, *, user_id: int) -> list[PostRecord]:
        return self.authored.get(user_id, [])

    async def list_liked_by_user(self, *, user_id: int) -> list[PostRecord]:
        return self.liked.get(user_id, [])


class FakePasswordHasher:
    def __init__(self) -> None:
        self.hash_calls: list[str] = []

    def hash_password(self, password: str) -> str:
        self.hash_calls.append(password)
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed::{password}"


class FakeAvatarStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []

    async def save(self, *, filename: str, content: bytes) -> str:
        self.files[filename] = content
        return f"/image/users/{filename}"

    async def delete(self, *, filename: str) -> None:
        self.deleted.append(filename)
        self.files.pop(filename, None)


def _service(
    users: FakeUserRepository,
    *,
    posts: FakePostRepository | None = None,
    hasher: FakePasswordHasher | None = None,
    storage: FakeAvatarStorage | None = None,
) -> UserAccountService:
    return UserAccountService(
        users=users,
        posts=posts or FakePostRepository(),
        password_hasher=hasher or FakePasswordHasher(),
        avatar_storage=storage or FakeAvatarStorage(),
        upload_id_factory=lambda: "upload-id",
    )


@pytest.mark.asyncio
async def test_register_creates_user_with_normalized_email_and_hashed_password() -> None:
    users = FakeUserRepository()
    hasher = FakePasswordHasher()
    service = _service(users, hasher=hasher)

    result = await service.register(
        SignupForm(name=" Alice ", email=" Alice@Example.org", password="pw")
    )

    assert result.ok
    assert result.user is not None
    assert result.user.email == "alice@example.org"
    assert result.user.name == "Alice"
    assert users.create_payloads[0].password_hash == "hashed::pw"
    assert hasher.hash_calls == ["pw"]


@pytest.mark.asyncio
async def test_register_blank_name_returns_error_without_hashing() -> None:
    users = FakeUserRepository()
    hasher = FakePasswordHasher()
    service = _service(users, hasher=hasher)

    result = await service.register(SignupForm(name="", email="a@example.org", password="pw"))

    assert not result.ok
    assert [(error.param, error.msg) for error in result.errors] == [
        ("name", "Name can't be blank")
    ]
    assert hasher.hash_calls == []
    assert users.create_payloads == []


@pytest.mark.asyncio
async def test_register_duplicate_email_is_rejected_before_hashing() -> None:
    users = FakeUserRepository(users={1: _make_user()})
    hasher = FakePasswordHasher()
    service = _service(users, hasher=hasher)

    result = await service.register(
        SignupForm(name="Other", email="ALICE@example.org", password="pw")
    )

    assert not result.ok
    assert [error.msg for error in result.errors] == ["Email has already been taken"]
    assert hasher.hash_calls == []
    assert users.create_payloads == []


@pytest.mark.asyncio
async def test_register_insert_conflict_becomes_form_error() -> None:
    users = FakeUserRepository(conflict_on_write=True)
    service = _service(users)

    result = await service.register(SignupForm(name="Bob", email="bob@example.org", password="pw"))

    assert not result.ok
    assert result.errors[0].param == "email"


@pytest.mark.asyncio
async def test_update_profile_with_accepted_upload_stores_generated_name() -> None:
    users = FakeUserRepository(users={1: _make_user()})
    storage = FakeAvatarStorage()
    service = _service(users, storage=storage)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="Alice B", email="alice@example.org"),
        upload=AvatarUpload(
            declared_media_type="image/png",
            content=b"\x89PNG",
            client_filename="../../etc/passwd.png",
        ),
    )

    assert result.ok
    assert result.user is not None
    assert result.user.image_name == "/image/users/upload-id.png"
    assert storage.files == {"upload-id.png": b"\x89PNG"}


@pytest.mark.asyncio
async def test_update_profile_rejects_pdf_and_writes_nothing() -> None:
    users = FakeUserRepository(users={1: _make_user()})
    storage = FakeAvatarStorage()
    service = _service(users, storage=storage)
    form = ProfileForm(name="New Name", email="new@example.org")

    result = await service.update_profile(
        user_id=1,
        form=form,
        upload=AvatarUpload(declared_media_type="application/pdf", content=b"%PDF"),
    )

    assert not result.ok
    assert result.submitted == form
    assert [(error.param, error.msg, error.value) for error in result.errors] == [
        ("image", UPLOAD_REJECTED_MESSAGE, "application/pdf")
    ]
    assert storage.files == {}
    assert users.update_payloads == []


@pytest.mark.asyncio
async def test_update_profile_merges_field_and_upload_errors() -> None:
    users = FakeUserRepository(users={1: _make_user()})
    service = _service(users)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="", email=""),
        upload=AvatarUpload(declared_media_type="image/gif", content=b"GIF89a"),
    )

    assert [error.param for error in result.errors] == ["name", "email", "image"]


@pytest.mark.asyncio
async def test_update_profile_without_upload_keeps_image() -> None:
    users = FakeUserRepository(users={1: _make_user(image_name="/image/users/old.png")})
    storage = FakeAvatarStorage()
    service = _service(users, storage=storage)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="Alice", email="alice@example.org"),
        upload=None,
    )

    assert result.ok
    assert result.user is not None
    assert result.user.image_name == "/image/users/old.png"
    assert users.update_payloads[0].image_name is None
    assert storage.files == {}


@pytest.mark.asyncio
async def test_update_profile_rejects_email_of_other_user() -> None:
    users = FakeUserRepository(
        users={1: _make_user(), 2: _make_user(user_id=2, email="bob@example.org")}
    )
    service = _service(users)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="Alice", email="bob@example.org"),
        upload=None,
    )

    assert [error.msg for error in result.errors] == ["Email has already been taken"]


@pytest.mark.asyncio
async def test_update_profile_keeping_own_email_is_allowed() -> None:
    users = FakeUserRepository(users={1: _make_user()})
    service = _service(users)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="Alice", email="alice@example.org"),
        upload=None,
    )

    assert result.ok


@pytest.mark.asyncio
async def test_update_profile_discards_stored_avatar_when_row_write_conflicts() -> None:
    users = FakeUserRepository(users={1: _make_user()}, conflict_on_write=True)
    storage = FakeAvatarStorage()
    service = _service(users, storage=storage)

    result = await service.update_profile(
        user_id=1,
        form=ProfileForm(name="Alice", email="alice@example.org"),
        upload=AvatarUpload(declared_media_type="image/jpeg", content=b"jpeg"),
    )

    assert not result.ok
    assert storage.deleted == ["upload-id.jpeg"]
    assert storage.files == {}


@pytest.mark.asyncio
async def test_update_profile_for_vanished_user_discards_avatar_and_raises() -> None:
    users = FakeUserRepository(users={1: _make_user()}, vanish_on_update=True)
    storage = FakeAvatarStorage()
    service = _service(users, storage=storage)

    with pytest.raises(UserNotFoundError):
        await service.update_profile(
            user_id=1,
            form=ProfileForm(name="Alice", email="alice@example.org"),
            upload=AvatarUpload(declared_media_type="image/png", content=b"png"),
        )

    assert storage.files == {}


@pytest.mark.asyncio
async def test_profile_pages_return_posts_and_likes() -> None:
    author = PostAuthor(user_id=2, name="Bob", image_name=None)
    post = PostRecord(post_id=7, content="hello", created_at=datetime.now(tz=UTC), author=author)
    users = FakeUserRepository(users={1: _make_user()})
    posts = FakePostRepository(authored={1: []}, liked={1: [post]})
    service = _service(users, posts=posts)

    profile = await service.get_profile(user_id=1)
    likes = await service.get_likes(user_id=1)

    assert profile.user.user_id == 1
    assert profile.posts == []
    assert likes.posts == [post]


@pytest.mark.asyncio
async def test_unknown_user_raises_not_found() -> None:
    service = _service(FakeUserRepository())

    with pytest.raises(UserNotFoundError):
        await service.get_profile(user_id=99)
