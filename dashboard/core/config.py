"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the background credential
sweeper, and the operational scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Support providing list settings as a comma-separated string."""
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class DiscordSettings(BaseSettings):
    """Configuration required for the Discord OAuth login flow."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    client_id: str = Field(..., validation_alias="DISCORD_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="DISCORD_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="DISCORD_REDIRECT_URI")
    api_base_url: str = Field(
        "https://discord.com/api", validation_alias="DISCORD_API_BASE_URL"
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("identify", "email"), validation_alias="DISCORD_OAUTH_SCOPES"
    )
    http_timeout_seconds: float = Field(
        10.0,
        validation_alias="DISCORD_HTTP_TIMEOUT_SECONDS",
        description="Upper bound for every call made to the identity provider.",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SecuritySettings(BaseSettings):
    """Session signing, credential encryption and admin configuration."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    jwt_secret: str = Field(..., validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", validation_alias="JWT_ALGORITHM")
    session_ttl_seconds: int = Field(86400, validation_alias="SESSION_TTL_SECONDS")
    credential_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="CREDENTIAL_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored "
            "Discord credentials. Falls back to the JWT secret."
        ),
    )
    admin_discord_ids: Annotated[tuple[str, ...], NoDecode] = Field(
        (), validation_alias="ADMIN_DISCORD_IDS"
    )

    @field_validator("admin_discord_ids", mode="before")
    @classmethod
    def _split_admin_ids(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


class ExternalApiSettings(BaseSettings):
    """Settings for the bot's administrative API and its CDN."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    base_url: str = Field(
        "https://api.killua.dev", validation_alias="EXTERNAL_API_BASE_URL"
    )
    secret: str = Field(
        ...,
        validation_alias="EXTERNAL_API_SECRET",
        description="Shared secret used to derive CDN capability tokens.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    cors_allow_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="CORS_ALLOW_ORIGINS"
    )
    database_path: str = Field(
        "data/dashboard.db", validation_alias="DASHBOARD_DB_PATH"
    )
    credential_sweep_interval_seconds: int = Field(
        3600, validation_alias="CREDENTIAL_SWEEP_INTERVAL_SECONDS"
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    external_api: ExternalApiSettings = Field(default_factory=ExternalApiSettings)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DiscordSettings",
    "ExternalApiSettings",
    "SecuritySettings",
    "get_settings",
]
