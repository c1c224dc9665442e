"""
Domain model for Discord credentials held server-side per session.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class CredentialRecord(BaseModel):
    """Represents one row of the credential vault."""

    session_token: str = Field(..., description="Session token the credential is bound to.")
    credential: str = Field(..., description="Discord access token, encrypted at rest.")
    owner_id: str = Field(..., description="Discord id of the identity that logged in.")
    created_at: datetime
    expires_at: datetime

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at


__all__ = ["CredentialRecord"]
