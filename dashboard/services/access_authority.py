"""
Login orchestration and authorization decisions for the dashboard.

The authority is the only component the HTTP layer talks to. It chains the
Discord exchange, identity upsert, session issuance and credential storage,
and every rejection it produces is a typed ``DashboardError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple
from urllib.parse import quote, urlencode

from dashboard.core.exceptions import (
    CredentialMissingError,
    ExchangeFailedError,
    ForbiddenError,
    IdentityNotFoundError,
    InvalidExpiryError,
    InvalidTokenError,
)
from dashboard.models.identity import DiscordProfile, Identity
from dashboard.services.capability_tokens import (
    CDN_SCOPE,
    CapabilityTokenSigner,
    normalize_resource_path,
)
from dashboard.services.credential_vault import CredentialVault
from dashboard.services.session_tokens import SessionTokenIssuer
from dashboard.utils.time import Clock, epoch_seconds, utcnow

logger = logging.getLogger(__name__)


class OAuthExchanger(Protocol):
    async def exchange(self, code: str) -> Tuple[str, DiscordProfile]: ...


class IdentityStore(Protocol):
    def get(self, discord_id: str) -> Optional[Identity]: ...

    def upsert(self, identity: Identity) -> Identity: ...


@dataclass(frozen=True)
class LoginResult:
    session_token: str
    identity: Identity


@dataclass(frozen=True)
class ResourceLink:
    url: str
    token: str
    expiry: int


@dataclass(frozen=True)
class FileViewerToken:
    token: str
    expiry: int
    base_url: str


class AccessAuthority:
    """Orchestrates login, session checks, admin gating and CDN link minting."""

    def __init__(
        self,
        *,
        oauth_client: OAuthExchanger,
        identity_store: IdentityStore,
        session_tokens: SessionTokenIssuer,
        vault: CredentialVault,
        signer: CapabilityTokenSigner,
        admin_ids: Iterable[str],
        external_api_base_url: str,
        clock: Clock = utcnow,
    ) -> None:
        self._oauth = oauth_client
        self._identities = identity_store
        self._sessions = session_tokens
        self._vault = vault
        self._signer = signer
        self._admin_ids = frozenset(admin_id.strip() for admin_id in admin_ids if admin_id.strip())
        self._external_api_base_url = external_api_base_url.rstrip("/")
        self._clock = clock

    async def login(self, code: str) -> LoginResult:
        """Exchange ``code`` and return a session whose credential is already stored."""
        if not code:
            raise ExchangeFailedError("Authorization code is required.")

        access_token, profile = await self._oauth.exchange(code)
        identity = self._upsert_identity(profile)
        session_token = self._sessions.issue(identity.discord_id)
        self._vault.store(session_token, access_token, identity.discord_id)

        logger.info("Identity %s logged in", identity.discord_id)
        return LoginResult(session_token=session_token, identity=identity)

    def authenticate(self, session_token: Optional[str]) -> Identity:
        if not session_token:
            raise InvalidTokenError("Invalid or expired session token")
        identity_id = self._sessions.verify(session_token)
        identity = self._identities.get(identity_id)
        if identity is None:
            logger.warning("Valid session for unknown identity %s", identity_id)
            raise IdentityNotFoundError("User not found")
        return identity

    def is_admin(self, identity_id: str) -> bool:
        return identity_id in self._admin_ids

    def require_admin(self, identity: Identity) -> Identity:
        if not self.is_admin(identity.discord_id):
            logger.info("Identity %s denied admin access", identity.discord_id)
            raise ForbiddenError("Access denied. Admin privileges required.")
        return identity

    def authorize_admin(self, session_token: Optional[str]) -> Identity:
        return self.require_admin(self.authenticate(session_token))

    def resolve_credential(self, session_token: Optional[str]) -> str:
        credential = self._vault.lookup(session_token)
        if credential is None:
            raise CredentialMissingError("Discord token not found")
        return credential

    def has_credential(self, session_token: Optional[str]) -> bool:
        return self._vault.exists(session_token)

    def logout(self, session_token: Optional[str]) -> None:
        """Revoke the stored credential; the session token itself is discarded client-side."""
        self._vault.delete(session_token)

    def mint_resource_link(self, identity_id: str, path: str, expires_at: int) -> ResourceLink:
        if not self.is_admin(identity_id):
            raise ForbiddenError("Access denied. Admin privileges required.")

        now = epoch_seconds(self._clock())
        if expires_at <= now:
            raise InvalidExpiryError("Expiry time must be in the future")

        canonical_path = normalize_resource_path(path)
        capability = self._signer.token_for_resource_with_duration(
            canonical_path, expires_at - now, issued_at=now
        )
        relative_path = canonical_path[len(CDN_SCOPE) + 1:]
        query = urlencode({"token": capability.token, "expiry": capability.expires_at})
        url = f"{self._cdn_base_url}/{quote(relative_path, safe='/')}?{query}"
        return ResourceLink(url=url, token=capability.token, expiry=capability.expires_at)

    def file_viewer_token(self, identity_id: str) -> FileViewerToken:
        if not self.is_admin(identity_id):
            raise ForbiddenError("Access denied. Admin privileges required.")
        capability = self._signer.base_token()
        return FileViewerToken(
            token=capability.token,
            expiry=capability.expires_at,
            base_url=self._cdn_base_url,
        )

    @property
    def _cdn_base_url(self) -> str:
        return f"{self._external_api_base_url}/image/{CDN_SCOPE}"

    def _upsert_identity(self, profile: DiscordProfile) -> Identity:
        logged_in_at = self._clock()
        existing = self._identities.get(profile.id)
        if existing is None:
            identity = Identity.from_profile(profile, logged_in_at=logged_in_at)
        else:
            identity = existing.refreshed_from(profile, logged_in_at=logged_in_at)
        return self._identities.upsert(identity)


__all__ = [
    "AccessAuthority",
    "FileViewerToken",
    "LoginResult",
    "ResourceLink",
]
