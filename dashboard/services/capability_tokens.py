"""
CDN capability tokens.

A capability token is ``sha256(path + expiry + secret)`` rendered as 64
lowercase hex characters. The bot API recomputes the same digest to authorize
``/image/cdn/<path>?token=<token>&expiry=<epoch>`` without any shared state
beyond the secret, so the path must be canonicalized identically on both
sides.
"""

from __future__ import annotations

import hashlib
import hmac
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from dashboard.core.exceptions import InvalidExpiryError, InvalidResourcePathError
from dashboard.utils.time import Clock, epoch_seconds, utcnow

CDN_SCOPE = "cdn"
BASE_TOKEN_TTL = timedelta(days=7)
BASE_TOKEN_REFRESH_BUFFER = timedelta(hours=1)

_NAMESPACE_PREFIXES = ("image/", f"{CDN_SCOPE}/")


@dataclass(frozen=True)
class CapabilityToken:
    token: str
    expires_at: int


def normalize_resource_path(path: str) -> str:
    """Canonicalize a resource path into ``cdn/<relative-path>``.

    Accepts bare paths, paths under the ``image/`` namespace (with or without a
    leading slash) and paths already under ``cdn/``. Idempotent.
    """
    relative = (path or "").strip().lstrip("/")
    for prefix in _NAMESPACE_PREFIXES:
        if relative.startswith(prefix):
            relative = relative[len(prefix):]
    if not relative:
        raise InvalidResourcePathError("Resource path must not be empty.")
    return f"{CDN_SCOPE}/{relative}"


class CapabilityTokenSigner:
    """Derive CDN access tokens and cache the broad base token."""

    def __init__(self, *, secret: str, clock: Clock = utcnow) -> None:
        if not secret:
            raise ValueError("Capability token secret must be provided.")
        self._secret = secret
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: Optional[CapabilityToken] = None

    def base_token(self) -> CapabilityToken:
        """Return the cached ``cdn`` token, minting a new one near its expiry."""
        buffer_seconds = int(BASE_TOKEN_REFRESH_BUFFER.total_seconds())
        with self._lock:
            now = self._now()
            cached = self._cached
            if cached is not None and now < cached.expires_at - buffer_seconds:
                return cached
            expires_at = now + int(BASE_TOKEN_TTL.total_seconds())
            fresh = CapabilityToken(self._digest(CDN_SCOPE, expires_at), expires_at)
            self._cached = fresh
            return fresh

    def token_for_resource(self, path: str, expires_at: int) -> str:
        return self._digest(normalize_resource_path(path), expires_at)

    def token_for_resource_with_duration(
        self,
        path: str,
        duration_seconds: int,
        *,
        issued_at: Optional[int] = None,
    ) -> CapabilityToken:
        """Token valid for ``duration_seconds`` from ``issued_at`` (default: now)."""
        if duration_seconds <= 0:
            raise InvalidExpiryError("Token duration must be positive.")
        start = issued_at if issued_at is not None else self._now()
        expires_at = start + duration_seconds
        return CapabilityToken(self.token_for_resource(path, expires_at), expires_at)

    def verify_resource_token(self, path: str, expires_at: int, token: str) -> bool:
        if self._now() >= expires_at:
            return False
        try:
            expected = self.token_for_resource(path, expires_at)
        except InvalidResourcePathError:
            return False
        return hmac.compare_digest(expected, (token or "").lower())

    def _digest(self, scope: str, expires_at: int) -> str:
        material = f"{scope}{expires_at}{self._secret}".encode("utf-8")
        return hashlib.sha256(material).hexdigest()

    def _now(self) -> int:
        return epoch_seconds(self._clock())


__all__ = [
    "BASE_TOKEN_TTL",
    "CDN_SCOPE",
    "CapabilityToken",
    "CapabilityTokenSigner",
    "normalize_resource_path",
]
