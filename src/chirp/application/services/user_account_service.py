"""Application service for signup, profile pages and profile editing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from chirp.application.dto.user_forms import (
    AvatarUpload,
    ProfileForm,
    ProfileUpdateResult,
    RegistrationResult,
    SignupForm,
    UserProfilePage,
)
from chirp.application.ports.avatar_storage_port import AvatarStoragePort
from chirp.application.ports.password_hasher_port import PasswordHasherPort
from chirp.application.ports.post_repository_port import PostRepositoryPort
from chirp.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserCreateInput,
    UserProfileUpdateInput,
    UserRecord,
    UserRepositoryPort,
)
from chirp.domain.auth.credentials import (
    collect_profile_field_errors,
    collect_signup_field_errors,
    email_taken_error,
    normalize_user_email,
)
from chirp.domain.form_errors import FormError
from chirp.domain.media import (
    UnsupportedMediaTypeError,
    avatar_filename,
    classify_media_type,
    generate_upload_id,
)

logger = logging.getLogger(__name__)

AVATAR_FIELD_NAME = "image"


class UserNotFoundError(LookupError):
    """Raised when a referenced user does not exist."""

    def __init__(self, *, user_id: int) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class UserAccountService:
    """Expose user account use-cases for the HTML routes."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        posts: PostRepositoryPort,
        password_hasher: PasswordHasherPort,
        avatar_storage: AvatarStoragePort,
        upload_id_factory: Callable[[], str] = generate_upload_id,
    ) -> None:
        self._users = users
        self._posts = posts
        self._password_hasher = password_hasher
        self._avatar_storage = avatar_storage
        self._upload_id_factory = upload_id_factory

    async def list_users(self) -> list[UserRecord]:
        """Return every registered user."""

        return await self._users.list_users()

    async def get_user(self, *, user_id: int) -> UserRecord:
        """Return one user or raise not-found."""

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user

    async def get_profile(self, *, user_id: int) -> UserProfilePage:
        """Return one user with the posts they wrote."""

        user = await self.get_user(user_id=user_id)
        posts = await self._posts.list_by_user(user_id=user.user_id)
        return UserProfilePage(user=user, posts=posts)

    async def get_likes(self, *, user_id: int) -> UserProfilePage:
        """Return one user with the posts they liked."""

        user = await self.get_user(user_id=user_id)
        posts = await self._posts.list_liked_by_user(user_id=user.user_id)
        return UserProfilePage(user=user, posts=posts)

    async def register(self, form: SignupForm) -> RegistrationResult:
        """Create an account once every field rule and the email uniqueness check pass.

        The password is hashed only after validation succeeds.
        """

        errors = collect_signup_field_errors(
            name=form.name,
            email=form.email,
            password=form.password,
        )
        email = normalize_user_email(email=form.email)
        if email and await self._users.get_by_email(email=email) is not None:
            errors.append(email_taken_error(email=form.email))
        if errors:
            logger.info("user_signup_rejected errors=%s", _error_params(errors))
            return RegistrationResult(errors=errors)

        password_hash = await asyncio.to_thread(
            self._password_hasher.hash_password,
            form.password,
        )
        try:
            user = await self._users.create_user(
                UserCreateInput(
                    name=form.name.strip(),
                    email=email,
                    password_hash=password_hash,
                )
            )
        except DuplicateEmailError:
            logger.info("user_signup_rejected errors=email reason=insert_conflict")
            return RegistrationResult(errors=[email_taken_error(email=form.email)])

        logger.info("user_signed_up user_id=%s", user.user_id)
        return RegistrationResult(user=user)

    async def update_profile(
        self,
        *,
        user_id: int,
        form: ProfileForm,
        upload: AvatarUpload | None,
    ) -> ProfileUpdateResult:
        """Validate fields and avatar together, then store the avatar and update the row."""

        errors = collect_profile_field_errors(name=form.name, email=form.email)
        email = normalize_user_email(email=form.email)
        if email:
            existing = await self._users.get_by_email(email=email)
            if existing is not None and existing.user_id != user_id:
                errors.append(email_taken_error(email=form.email))

        filename: str | None = None
        if upload is not None:
            try:
                accepted = classify_media_type(upload.declared_media_type)
            except UnsupportedMediaTypeError as exc:
                logger.info(
                    "avatar_upload_rejected user_id=%s media_type=%s",
                    user_id,
                    exc.media_type,
                )
                errors.append(
                    FormError(
                        param=AVATAR_FIELD_NAME,
                        msg=exc.reason,
                        location="body",
                        value=exc.media_type,
                    )
                )
            else:
                filename = avatar_filename(accepted, id_factory=self._upload_id_factory)

        if errors:
            return ProfileUpdateResult(errors=errors, submitted=form)

        image_name: str | None = None
        if upload is not None and filename is not None:
            image_name = await self._avatar_storage.save(filename=filename, content=upload.content)
            logger.info("avatar_stored user_id=%s filename=%s", user_id, filename)

        try:
            updated = await self._users.update_profile(
                UserProfileUpdateInput(
                    user_id=user_id,
                    name=form.name.strip(),
                    email=email,
                    image_name=image_name,
                )
            )
        except DuplicateEmailError:
            await self._discard_avatar(filename)
            return ProfileUpdateResult(errors=[email_taken_error(email=form.email)], submitted=form)
        except BaseException:
            await self._discard_avatar(filename)
            raise

        if updated is None:
            await self._discard_avatar(filename)
            raise UserNotFoundError(user_id=user_id)

        logger.info("profile_updated user_id=%s image_changed=%s", user_id, image_name is not None)
        return ProfileUpdateResult(user=updated)

    async def _discard_avatar(self, filename: str | None) -> None:
        """Delete an avatar written for an update that did not persist."""

        if filename is None:
            return
        await self._avatar_storage.delete(filename=filename)
        logger.info("avatar_discarded filename=%s", filename)


def _error_params(errors: list[FormError]) -> str:
    return ",".join(error.param for error in errors)
