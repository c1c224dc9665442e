"""
Domain models for dashboard users and their Discord profile.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dashboard.utils.time import utcnow


class DiscordProfile(BaseModel):
    """Minimal profile returned by Discord's ``/users/@me`` endpoint."""

    id: str = Field(..., min_length=1, description="Stable Discord snowflake.")
    username: str
    discriminator: Optional[str] = None
    avatar: Optional[str] = None
    email: Optional[str] = None


class Identity(BaseModel):
    """A dashboard user, keyed by Discord id and refreshed on every login."""

    discord_id: str
    username: str
    discriminator: Optional[str] = None
    avatar: Optional[str] = None
    banner: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    last_login: Optional[datetime] = None
    is_premium: bool = False
    premium_tier: Optional[str] = None
    premium_expires: Optional[datetime] = None

    @classmethod
    def from_profile(cls, profile: DiscordProfile, *, logged_in_at: datetime) -> "Identity":
        return cls(
            discord_id=profile.id,
            username=profile.username,
            discriminator=profile.discriminator,
            avatar=profile.avatar,
            email=profile.email,
            created_at=logged_in_at,
            last_login=logged_in_at,
        )

    def refreshed_from(self, profile: DiscordProfile, *, logged_in_at: datetime) -> "Identity":
        """Copy with mutable profile fields and ``last_login`` updated."""
        return self.model_copy(
            update={
                "username": profile.username,
                "discriminator": profile.discriminator,
                "avatar": profile.avatar,
                "email": profile.email,
                "last_login": logged_in_at,
            }
        )


__all__ = ["DiscordProfile", "Identity"]
