"""
Discord OAuth utilities.

Exchange an authorization code for a Discord access token and load the minimal
profile needed to identify the user. Every call is a single attempt bounded by
the configured timeout; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from dashboard.core.config import DiscordSettings
from dashboard.core.exceptions import ExchangeFailedError, ProfileFetchFailedError
from dashboard.models.identity import DiscordProfile

logger = logging.getLogger(__name__)


class DiscordOAuthClient:
    """Build Discord authorization URLs and exchange authorization codes."""

    def __init__(
        self,
        settings: DiscordSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self._settings.api_base_url}/oauth2/token"

    @property
    def profile_url(self) -> str:
        return f"{self._settings.api_base_url}/users/@me"

    def build_authorization_url(self, state: Optional[str] = None) -> str:
        """Construct the Discord OAuth consent URL."""
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": str(self._settings.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._settings.scopes),
        }
        if state:
            params["state"] = state
        return f"{self._settings.api_base_url}/oauth2/authorize?{urlencode(params)}"

    async def exchange(self, code: str) -> Tuple[str, DiscordProfile]:
        """Return ``(access_token, profile)`` for an authorization code."""
        access_token = await self.exchange_authorization_code(code)
        profile = await self.fetch_profile(access_token)
        return access_token, profile

    async def exchange_authorization_code(self, code: str) -> str:
        payload = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": str(self._settings.redirect_uri),
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Discord token exchange failed: %s", type(exc).__name__)
            raise ExchangeFailedError("Could not reach the Discord token endpoint.") from exc

        if response.status_code != httpx.codes.OK:
            logger.warning("Discord token exchange returned HTTP %s", response.status_code)
            raise ExchangeFailedError(
                "Failed to exchange authorization code for access token."
            )

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise ExchangeFailedError("Discord token endpoint returned invalid JSON.") from exc

        if not isinstance(token_payload, dict):
            raise ExchangeFailedError("Discord token endpoint returned an unexpected payload.")

        access_token = token_payload.get("access_token")
        if not access_token:
            raise ExchangeFailedError("No access token received from Discord.")
        return access_token

    async def fetch_profile(self, access_token: str) -> DiscordProfile:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.profile_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Discord profile fetch failed: %s", type(exc).__name__)
            raise ProfileFetchFailedError("Could not reach the Discord profile endpoint.") from exc

        if response.status_code != httpx.codes.OK:
            logger.warning("Discord profile fetch returned HTTP %s", response.status_code)
            raise ProfileFetchFailedError("Failed to fetch user info from Discord.")

        try:
            return DiscordProfile.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProfileFetchFailedError("Discord returned an unusable profile.") from exc

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds,
            transport=self._transport,
        )


__all__ = ["DiscordOAuthClient"]
