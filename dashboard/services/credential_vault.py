"""
Server-side storage of Discord credentials keyed by session token.

Records live for a fixed seven days from creation. Reads check expiry
themselves, so a record that is logically expired but not yet swept is never
returned; the sweeper only reclaims space.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from dashboard.clients.credential_store import SQLiteCredentialStore
from dashboard.models.credential import CredentialRecord
from dashboard.services.credential_cipher import CredentialCipher
from dashboard.utils.time import Clock, ensure_utc, utcnow

logger = logging.getLogger(__name__)

CREDENTIAL_TTL = timedelta(days=7)
DEFAULT_SWEEP_INTERVAL_SECONDS = 3600


class CredentialVault:
    """TTL-bounded association between a session token and a Discord credential."""

    def __init__(
        self,
        store: SQLiteCredentialStore,
        cipher: CredentialCipher,
        *,
        ttl: timedelta = CREDENTIAL_TTL,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._cipher = cipher
        self._ttl = ttl
        self._clock = clock

    def store(
        self, session_token: Optional[str], credential: str, owner_id: str
    ) -> Optional[CredentialRecord]:
        """Upsert the credential for ``session_token`` with a fresh seven-day expiry."""
        if not session_token:
            logger.warning("Ignoring credential store request without a session token.")
            return None

        created_at = self._clock()
        record = CredentialRecord(
            session_token=session_token,
            credential=self._cipher.encrypt(credential),
            owner_id=owner_id,
            created_at=created_at,
            expires_at=created_at + self._ttl,
        )
        self._store.put(record)
        logger.info("Stored Discord credential for identity %s", owner_id)
        return record

    def lookup(self, session_token: Optional[str]) -> Optional[str]:
        record = self._live_record(session_token)
        if record is None:
            return None
        return self._cipher.decrypt(record.credential)

    def exists(self, session_token: Optional[str]) -> bool:
        return self._live_record(session_token) is not None

    def lookup_by_owner(self, owner_id: Optional[str]) -> Optional[str]:
        if not owner_id:
            return None
        now = self._clock()
        record = self._store.get_latest_for_owner(owner_id, live_at=now)
        if record is None or not record.is_live(now):
            return None
        return self._cipher.decrypt(record.credential)

    def delete(self, session_token: Optional[str]) -> None:
        if not session_token:
            return
        if self._store.delete(session_token):
            logger.info("Revoked stored Discord credential for a session.")

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every record with ``expires_at`` strictly before ``now``."""
        cutoff = ensure_utc(now) if now is not None else self._clock()
        deleted = self._store.delete_expired(cutoff)
        if deleted:
            logger.info("Swept %d expired Discord credential(s)", deleted)
        return deleted

    def _live_record(self, session_token: Optional[str]) -> Optional[CredentialRecord]:
        if not session_token:
            return None
        record = self._store.get(session_token)
        if record is None or not record.is_live(self._clock()):
            return None
        return record


class CredentialSweeper:
    """Background task that purges expired vault records on a fixed interval."""

    def __init__(
        self,
        vault: CredentialVault,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._vault = vault
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Credential sweeper is already running")
            return
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("Credential sweeper started (interval: %ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Credential sweeper stopped")

    async def run_once(self) -> int:
        """Run a single sweep off the event loop."""
        return await asyncio.to_thread(self._vault.sweep_expired)

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Credential sweep failed; retrying next interval")
            await asyncio.sleep(self._interval)


__all__ = [
    "CREDENTIAL_TTL",
    "CredentialSweeper",
    "CredentialVault",
]
