"""SQLite plumbing shared by the identity and credential stores."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from dashboard.core.exceptions import StorageError
from dashboard.utils.time import ensure_utc


def to_db_timestamp(value: datetime) -> str:
    # Fixed-width UTC text keeps lexicographic order equal to time order.
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    return ensure_utc(datetime.fromisoformat(value))


class SQLiteStore:
    """Base class opening one connection per operation against a SQLite file."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False, timeout=5.0)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open database {self._db_path}.") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"Database operation failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        raise NotImplementedError


__all__ = ["SQLiteStore", "from_db_timestamp", "to_db_timestamp"]
