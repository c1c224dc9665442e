"""SQLite-backed store for dashboard identities keyed by Discord id."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from dashboard.clients.sqlite_store import SQLiteStore, to_db_timestamp
from dashboard.core.exceptions import StorageError
from dashboard.models.identity import Identity
from dashboard.utils.time import utcnow


class SQLiteIdentityStore(SQLiteStore):
    """Persist identities as JSON documents, one row per Discord id."""

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS identities (
                    discord_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def get(self, discord_id: str) -> Optional[Identity]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT data FROM identities WHERE discord_id = ?",
                (discord_id,),
            ).fetchone()
        if not row:
            return None
        try:
            return Identity.model_validate_json(row["data"])
        except ValidationError as exc:
            raise StorageError(f"Stored identity {discord_id} is unreadable.") from exc

    def upsert(self, identity: Identity) -> Identity:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO identities (discord_id, data, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(discord_id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
                """,
                (identity.discord_id, identity.model_dump_json(), to_db_timestamp(utcnow())),
            )
        return identity

    def delete(self, discord_id: str) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM identities WHERE discord_id = ?", (discord_id,))


__all__ = ["SQLiteIdentityStore"]
