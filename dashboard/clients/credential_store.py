"""SQLite table backing the credential vault, one row per active session."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from dashboard.clients.sqlite_store import SQLiteStore, from_db_timestamp, to_db_timestamp
from dashboard.models.credential import CredentialRecord


def _record_from_row(row: sqlite3.Row) -> CredentialRecord:
    return CredentialRecord(
        session_token=row["session_token"],
        credential=row["credential"],
        owner_id=row["owner_id"],
        created_at=from_db_timestamp(row["created_at"]),
        expires_at=from_db_timestamp(row["expires_at"]),
    )


class SQLiteCredentialStore(SQLiteStore):
    """Raw persistence for credential records; expiry policy lives in the vault."""

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS credential_records (
                    session_token TEXT PRIMARY KEY,
                    credential TEXT NOT NULL,
                    owner_id TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_credential_records_owner "
                "ON credential_records (owner_id, created_at)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_credential_records_expiry "
                "ON credential_records (expires_at)"
            )

    def put(self, record: CredentialRecord) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO credential_records
                    (session_token, credential, owner_id, created_at, expires_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(session_token) DO UPDATE SET
                    credential = excluded.credential,
                    owner_id = excluded.owner_id,
                    created_at = excluded.created_at,
                    expires_at = excluded.expires_at
                """,
                (
                    record.session_token,
                    record.credential,
                    record.owner_id,
                    to_db_timestamp(record.created_at),
                    to_db_timestamp(record.expires_at),
                ),
            )

    def get(self, session_token: str) -> Optional[CredentialRecord]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM credential_records WHERE session_token = ?",
                (session_token,),
            ).fetchone()
        if not row:
            return None
        return _record_from_row(row)

    def get_latest_for_owner(
        self, owner_id: str, *, live_at: datetime
    ) -> Optional[CredentialRecord]:
        """Newest record for ``owner_id`` that has not expired at ``live_at``."""
        with self._transaction() as conn:
            row = conn.execute(
                """
                SELECT * FROM credential_records
                WHERE owner_id = ? AND expires_at > ?
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (owner_id, to_db_timestamp(live_at)),
            ).fetchone()
        if not row:
            return None
        return _record_from_row(row)

    def delete(self, session_token: str) -> int:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM credential_records WHERE session_token = ?",
                (session_token,),
            )
            deleted = cursor.rowcount
        return deleted

    def delete_expired(self, before: datetime) -> int:
        """Remove every record whose ``expires_at`` is strictly before ``before``."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM credential_records WHERE expires_at < ?",
                (to_db_timestamp(before),),
            )
            deleted = cursor.rowcount
        return deleted


__all__ = ["SQLiteCredentialStore"]
