try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from dashboard.core.config import AppSettings
from dashboard.dependencies import (
    get_discord_settings,
    get_external_api_settings,
    get_security_settings,
)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    monkeypatch.setenv("ADMIN_DISCORD_IDS", " 1001, ,1002 ")
    monkeypatch.setenv("DISCORD_OAUTH_SCOPES", "identify,guilds")
    monkeypatch.setenv("DISCORD_API_BASE_URL", "https://discord.example/api/")
    monkeypatch.setenv("EXTERNAL_API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example,https://b.example")
    return AppSettings(_env_file=None)  # type: ignore[call-arg]


def test_list_settings_accept_comma_separated_values(settings: AppSettings) -> None:
    assert settings.security.admin_discord_ids == ("1001", "1002")
    assert settings.discord.scopes == ("identify", "guilds")
    assert settings.cors_allow_origins == ("https://a.example", "https://b.example")


def test_base_urls_drop_trailing_slash(settings: AppSettings) -> None:
    assert settings.discord.api_base_url == "https://discord.example/api"
    assert settings.external_api.base_url == "https://api.example.com"


def test_app_settings_only_carry_consumed_fields() -> None:
    assert set(AppSettings.model_fields) == {
        "environment",
        "log_level",
        "cors_allow_origins",
        "database_path",
        "credential_sweep_interval_seconds",
        "security",
        "discord",
        "external_api",
    }


def test_section_dependencies_share_the_cached_settings() -> None:
    from dashboard.core.config import get_settings

    settings = get_settings()

    assert get_discord_settings() is settings.discord
    assert get_security_settings() is settings.security
    assert get_external_api_settings() is settings.external_api
