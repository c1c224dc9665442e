"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_access_authority,
    get_capability_token_signer,
    get_credential_cipher,
    get_credential_store,
    get_credential_sweeper,
    get_credential_vault,
    get_discord_oauth_client,
    get_identity_store,
    get_session_token_issuer,
)
from .config import (
    AppSettingsDep,
    SettingsDependency,
    get_app_settings,
    get_discord_settings,
    get_external_api_settings,
    get_security_settings,
)

__all__ = [
    "AppSettingsDep",
    "SettingsDependency",
    "get_access_authority",
    "get_app_settings",
    "get_capability_token_signer",
    "get_credential_cipher",
    "get_credential_store",
    "get_credential_sweeper",
    "get_credential_vault",
    "get_discord_oauth_client",
    "get_discord_settings",
    "get_external_api_settings",
    "get_identity_store",
    "get_security_settings",
    "get_session_token_issuer",
]
