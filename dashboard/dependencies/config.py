"""
Settings dependencies shared by the route layer and the client factories.
"""

from typing import Annotated

from fastapi import Depends

from dashboard.core.config import (
    AppSettings,
    DiscordSettings,
    ExternalApiSettings,
    SecuritySettings,
    get_settings,
)


def get_app_settings() -> AppSettings:
    """Return the process-wide settings; ``get_settings`` caches the instance."""
    return get_settings()


def get_discord_settings() -> DiscordSettings:
    return get_app_settings().discord


def get_security_settings() -> SecuritySettings:
    return get_app_settings().security


def get_external_api_settings() -> ExternalApiSettings:
    return get_app_settings().external_api


SettingsDependency = Depends(get_app_settings)
AppSettingsDep = Annotated[AppSettings, SettingsDependency]

__all__ = [
    "AppSettingsDep",
    "SettingsDependency",
    "get_app_settings",
    "get_discord_settings",
    "get_external_api_settings",
    "get_security_settings",
]
