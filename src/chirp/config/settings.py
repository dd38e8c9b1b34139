"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]
BcryptRounds = Annotated[int, Field(ge=4, le=31)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    password_hash_rounds: BcryptRounds = Field(
        default=10,
        validation_alias="PASSWORD_HASH_ROUNDS",
    )
    avatar_upload_dir: NonEmptyStr = Field(
        default="public/image/users",
        validation_alias="AVATAR_UPLOAD_DIR",
    )
    avatar_url_prefix: NonEmptyStr = Field(
        default="/image/users",
        validation_alias="AVATAR_URL_PREFIX",
    )
    session_ttl_hours: PositiveInt = Field(
        default=24,
        validation_alias="SESSION_TTL_HOURS",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
