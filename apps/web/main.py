"""web entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from chirp.application.ports.avatar_storage_port import AvatarStoragePort
from chirp.application.ports.password_hasher_port import PasswordHasherPort
from chirp.application.ports.token_service_port import TokenServicePort
from chirp.application.services.auth_service import AuthService
from chirp.application.services.session_service import SessionService
from chirp.application.services.user_account_service import UserAccountService
from chirp.config.settings import Settings, load_settings
from chirp.infrastructure.db.auth_token_repository import SqlAlchemyAuthTokenRepository
from chirp.infrastructure.db.post_repository import SqlAlchemyPostRepository
from chirp.infrastructure.db.session import create_session_factory
from chirp.infrastructure.db.user_repository import SqlAlchemyUserRepository
from chirp.infrastructure.http.auth_router import build_auth_router
from chirp.infrastructure.http.session_guard import SessionGuard
from chirp.infrastructure.http.shell_context import install_error_pages
from chirp.infrastructure.http.user_router import build_user_router
from chirp.infrastructure.logging import configure_logging
from chirp.infrastructure.security.password_hasher import BcryptPasswordHasher
from chirp.infrastructure.security.token_service import OpaqueTokenService
from chirp.infrastructure.storage.avatar_storage import LocalAvatarStorage

WEB_HOST = "0.0.0.0"
WEB_PORT = 8000
logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    password_hasher: PasswordHasherPort | None = None,
    token_service: TokenServicePort | None = None,
) -> FastAPI:
    """Create FastAPI app serving account pages and uploaded avatars."""

    if settings is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)

    if password_hasher is None:
        password_hasher = BcryptPasswordHasher(rounds=settings.password_hash_rounds)
    if token_service is None:
        token_service = OpaqueTokenService()
    avatar_upload_dir = Path(settings.avatar_upload_dir)
    avatar_upload_dir.mkdir(parents=True, exist_ok=True)

    session_factory = create_session_factory(settings.database_url)
    users = SqlAlchemyUserRepository(session_factory)
    avatar_storage: AvatarStoragePort = LocalAvatarStorage(
        root=avatar_upload_dir,
        url_prefix=settings.avatar_url_prefix,
    )
    session_service = SessionService(
        users=users,
        auth_tokens=SqlAlchemyAuthTokenRepository(session_factory),
        token_service=token_service,
        ttl=timedelta(hours=settings.session_ttl_hours),
    )
    session_guard = SessionGuard(session_service=session_service)

    app = FastAPI()
    install_error_pages(app, session_guard=session_guard)
    app.include_router(
        build_auth_router(
            auth_service=AuthService(users=users, password_hasher=password_hasher),
            session_service=session_service,
            session_guard=session_guard,
        )
    )
    app.include_router(
        build_user_router(
            user_service=UserAccountService(
                users=users,
                posts=SqlAlchemyPostRepository(session_factory),
                password_hasher=password_hasher,
                avatar_storage=avatar_storage,
            ),
            session_service=session_service,
            session_guard=session_guard,
        )
    )
    app.mount(
        "/" + settings.avatar_url_prefix.strip("/"),
        StaticFiles(directory=str(avatar_upload_dir)),
        name="avatars",
    )
    logger.info("web_app_created avatar_dir=%s", avatar_upload_dir)
    return app


def run_asgi_server(*, host: str = WEB_HOST, port: int = WEB_PORT) -> None:
    """Run the web app as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.web.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run web runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
