"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from datetime import timedelta
from functools import lru_cache

from dashboard.clients import DiscordOAuthClient, SQLiteCredentialStore, SQLiteIdentityStore
from dashboard.dependencies.config import (
    get_app_settings,
    get_discord_settings,
    get_external_api_settings,
    get_security_settings,
)
from dashboard.services import (
    AccessAuthority,
    CapabilityTokenSigner,
    CredentialCipher,
    CredentialSweeper,
    CredentialVault,
    SessionTokenIssuer,
)


@lru_cache()
def get_discord_oauth_client() -> DiscordOAuthClient:
    """Create a singleton Discord OAuth client."""
    return DiscordOAuthClient(get_discord_settings())


@lru_cache()
def get_identity_store() -> SQLiteIdentityStore:
    """Provide the shared identity store."""
    return SQLiteIdentityStore(get_app_settings().database_path)


@lru_cache()
def get_credential_store() -> SQLiteCredentialStore:
    """Provide the table backing the credential vault."""
    return SQLiteCredentialStore(get_app_settings().database_path)


@lru_cache()
def get_credential_cipher() -> CredentialCipher:
    """Provide symmetric encryption for stored credentials."""
    security = get_security_settings()
    secret = security.credential_encryption_secret or security.jwt_secret
    return CredentialCipher(secret=secret)


@lru_cache()
def get_credential_vault() -> CredentialVault:
    return CredentialVault(get_credential_store(), get_credential_cipher())


@lru_cache()
def get_credential_sweeper() -> CredentialSweeper:
    """Provide the background task that purges expired vault records."""
    return CredentialSweeper(
        get_credential_vault(),
        interval_seconds=get_app_settings().credential_sweep_interval_seconds,
    )


@lru_cache()
def get_session_token_issuer() -> SessionTokenIssuer:
    security = get_security_settings()
    return SessionTokenIssuer(
        secret=security.jwt_secret,
        algorithm=security.jwt_algorithm,
        ttl=timedelta(seconds=security.session_ttl_seconds),
    )


@lru_cache()
def get_capability_token_signer() -> CapabilityTokenSigner:
    """Provide the CDN token signer; one instance so the base token cache is shared."""
    return CapabilityTokenSigner(secret=get_external_api_settings().secret)


@lru_cache()
def get_access_authority() -> AccessAuthority:
    """Build the authority that fronts every login and authorization decision."""
    return AccessAuthority(
        oauth_client=get_discord_oauth_client(),
        identity_store=get_identity_store(),
        session_tokens=get_session_token_issuer(),
        vault=get_credential_vault(),
        signer=get_capability_token_signer(),
        admin_ids=get_security_settings().admin_discord_ids,
        external_api_base_url=get_external_api_settings().base_url,
    )


__all__ = [
    "get_access_authority",
    "get_capability_token_signer",
    "get_credential_cipher",
    "get_credential_store",
    "get_credential_sweeper",
    "get_credential_vault",
    "get_discord_oauth_client",
    "get_identity_store",
    "get_session_token_issuer",
]
