"""Schemas for the login, session and CDN-link endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dashboard.models.identity import Identity


class LoginRequest(BaseModel):
    """Payload sent by the front-end after Discord redirects back with a code."""

    code: str = Field(..., description="Authorization code returned by Discord.")


class UserResponse(BaseModel):
    """Public view of an identity."""

    discord_id: str
    username: str
    discriminator: Optional[str] = None
    avatar: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None
    is_premium: bool = False
    premium_tier: Optional[str] = None
    premium_expires: Optional[datetime] = None

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserResponse":
        return cls.model_validate(identity.model_dump())


class LoginResponse(BaseModel):
    token: str = Field(..., description="Session token to send as a Bearer credential.")
    user: UserResponse


class DiscordTokenResponse(BaseModel):
    discord_token: str = Field(..., description="Discord access token stored for this session.")
    user: UserResponse


class AdminStatusResponse(BaseModel):
    is_admin: bool
    user: UserResponse


class CredentialStatusResponse(BaseModel):
    has_credential: bool
    user: UserResponse


class FileViewerTokenResponse(BaseModel):
    token: str
    expiry: int
    base_url: str


class ResourceLinkResponse(BaseModel):
    url: str
    token: str
    expiry: int


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
