"""Expose constructed client wrappers."""

from .credential_store import SQLiteCredentialStore
from .discord_auth import DiscordOAuthClient
from .identity_store import SQLiteIdentityStore

__all__ = [
    "DiscordOAuthClient",
    "SQLiteCredentialStore",
    "SQLiteIdentityStore",
]
