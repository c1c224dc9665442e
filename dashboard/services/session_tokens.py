"""Issue and verify the signed session tokens handed to dashboard clients."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta

import jwt
from jwt.exceptions import PyJWTError

from dashboard.core.exceptions import InvalidTokenError
from dashboard.utils.time import Clock, epoch_seconds, utcnow

logger = logging.getLogger(__name__)

SESSION_TOKEN_TYPE = "session"
DEFAULT_SESSION_TTL = timedelta(hours=24)

# Same message for every failure so callers cannot tell signature from expiry.
_REJECTION_MESSAGE = "Invalid or expired session token"


class SessionTokenIssuer:
    """Stateless JWT sessions whose subject is the identity's Discord id."""

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Session signing secret must be provided.")
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive.")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, identity_id: str) -> str:
        issued_at = self._clock()
        payload = {
            "sub": identity_id,
            "iat": epoch_seconds(issued_at),
            "exp": epoch_seconds(issued_at + self._ttl),
            "type": SESSION_TOKEN_TYPE,
            # Unique per login; the credential vault is keyed by token value.
            "jti": secrets.token_hex(16),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the identity id carried by ``token`` or raise ``InvalidTokenError``.

        Valid while ``now < exp``. Expiry is checked against the injected
        clock rather than by PyJWT so the boundary is exact and testable.
        """
        if not token:
            raise InvalidTokenError(_REJECTION_MESSAGE)
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except PyJWTError as exc:
            logger.debug("Session token rejected: %s", exc)
            raise InvalidTokenError(_REJECTION_MESSAGE) from exc

        if payload.get("type") != SESSION_TOKEN_TYPE:
            logger.debug("Session token rejected: unexpected type")
            raise InvalidTokenError(_REJECTION_MESSAGE)

        expires_at = payload.get("exp")
        if not isinstance(expires_at, int) or epoch_seconds(self._clock()) >= expires_at:
            logger.debug("Session token rejected: expired")
            raise InvalidTokenError(_REJECTION_MESSAGE)

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.debug("Session token rejected: empty subject")
            raise InvalidTokenError(_REJECTION_MESSAGE)
        return subject


__all__ = ["DEFAULT_SESSION_TTL", "SessionTokenIssuer"]
