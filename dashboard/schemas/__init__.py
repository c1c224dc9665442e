"""Public schema exports."""

from .auth import (
    AdminStatusResponse,
    CredentialStatusResponse,
    DiscordTokenResponse,
    FileViewerTokenResponse,
    LoginRequest,
    LoginResponse,
    ResourceLinkResponse,
    UserResponse,
)

__all__ = [
    "AdminStatusResponse",
    "CredentialStatusResponse",
    "DiscordTokenResponse",
    "FileViewerTokenResponse",
    "LoginRequest",
    "LoginResponse",
    "ResourceLinkResponse",
    "UserResponse",
]
