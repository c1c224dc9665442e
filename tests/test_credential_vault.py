try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio
import sqlite3
from datetime import timedelta

import pytest

from dashboard.clients.credential_store import SQLiteCredentialStore
from dashboard.core.exceptions import StorageError
from dashboard.services.credential_cipher import CredentialCipher
from dashboard.services.credential_vault import CredentialSweeper, CredentialVault


@pytest.fixture
def store(tmp_path) -> SQLiteCredentialStore:
    return SQLiteCredentialStore(str(tmp_path / "vault.db"))


@pytest.fixture
def vault(store: SQLiteCredentialStore, clock) -> CredentialVault:
    return CredentialVault(store, CredentialCipher(secret="vault-secret"), clock=clock)


def test_store_then_lookup_returns_credential(vault: CredentialVault) -> None:
    vault.store("session-1", "discord-token", "42")

    assert vault.lookup("session-1") == "discord-token"
    assert vault.exists("session-1")
    assert vault.lookup_by_owner("42") == "discord-token"


def test_records_expire_seven_days_after_creation(vault: CredentialVault, clock) -> None:
    record = vault.store("session-1", "discord-token", "42")

    assert record is not None
    assert record.expires_at - record.created_at == timedelta(days=7)


def test_credential_is_encrypted_at_rest(vault: CredentialVault, store: SQLiteCredentialStore) -> None:
    vault.store("session-1", "discord-token", "42")

    raw = store.get("session-1")
    assert raw is not None
    assert raw.credential != "discord-token"


def test_lookup_after_expiry_is_absent_without_sweep(
    vault: CredentialVault, store: SQLiteCredentialStore, clock
) -> None:
    vault.store("session-1", "discord-token", "42")

    clock.advance(days=7)

    assert vault.lookup("session-1") is None
    assert not vault.exists("session-1")
    assert vault.lookup_by_owner("42") is None
    # The row is still physically present until the sweep runs.
    assert store.get("session-1") is not None


def test_store_overwrites_existing_record(vault: CredentialVault, clock) -> None:
    vault.store("session-1", "first", "42")
    clock.advance(days=6)
    vault.store("session-1", "second", "42")
    clock.advance(days=2)

    assert vault.lookup("session-1") == "second"


def test_lookup_by_owner_prefers_newest_live_record(vault: CredentialVault, clock) -> None:
    vault.store("session-old", "old-token", "42")
    clock.advance(hours=1)
    vault.store("session-new", "new-token", "42")

    assert vault.lookup_by_owner("42") == "new-token"
    assert vault.lookup_by_owner("43") is None


def test_delete_is_unconditional_and_idempotent(vault: CredentialVault) -> None:
    vault.store("session-1", "discord-token", "42")

    vault.delete("session-1")
    vault.delete("session-1")

    assert vault.lookup("session-1") is None


@pytest.mark.parametrize("token", [None, ""])
def test_empty_session_token_is_absent_not_an_error(vault: CredentialVault, token) -> None:
    assert vault.store(token, "discord-token", "42") is None
    assert vault.lookup(token) is None
    assert vault.exists(token) is False
    vault.delete(token)


def test_sweep_removes_only_records_expired_before_now(
    vault: CredentialVault, store: SQLiteCredentialStore, clock
) -> None:
    start = clock()
    vault.store("oldest", "a", "1")
    clock.advance(days=1)
    vault.store("boundary", "b", "2")
    clock.advance(days=1)
    vault.store("fresh", "c", "3")

    # "oldest" expired a day ago; "boundary" expires exactly now.
    deleted = vault.sweep_expired(start + timedelta(days=8))

    assert deleted == 1
    assert store.get("oldest") is None
    assert store.get("boundary") is not None
    assert store.get("fresh") is not None


def test_storage_failures_surface_as_storage_error(vault: CredentialVault, tmp_path) -> None:
    with sqlite3.connect(tmp_path / "vault.db") as conn:
        conn.execute("DROP TABLE credential_records")

    with pytest.raises(StorageError):
        vault.lookup("session-1")
    with pytest.raises(StorageError):
        vault.store("session-1", "discord-token", "42")


def test_credential_under_rotated_key_is_storage_error(store: SQLiteCredentialStore, clock) -> None:
    CredentialVault(store, CredentialCipher(secret="old-key"), clock=clock).store(
        "session-1", "discord-token", "42"
    )
    rotated = CredentialVault(store, CredentialCipher(secret="new-key"), clock=clock)

    with pytest.raises(StorageError):
        rotated.lookup("session-1")


@pytest.mark.asyncio
async def test_sweeper_run_once_purges_expired_records(store: SQLiteCredentialStore, clock) -> None:
    vault = CredentialVault(store, CredentialCipher(secret="vault-secret"), clock=clock)
    vault.store("session-1", "discord-token", "42")
    clock.advance(days=8)

    sweeper = CredentialSweeper(vault, interval_seconds=3600)

    assert await sweeper.run_once() == 1
    assert store.get("session-1") is None


@pytest.mark.asyncio
async def test_sweeper_loop_starts_and_stops(store: SQLiteCredentialStore, clock) -> None:
    vault = CredentialVault(store, CredentialCipher(secret="vault-secret"), clock=clock)
    vault.store("session-1", "discord-token", "42")
    clock.advance(days=8)
    sweeper = CredentialSweeper(vault, interval_seconds=3600)

    await sweeper.start()
    assert sweeper.running
    for _ in range(50):
        if store.get("session-1") is None:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert not sweeper.running
    assert store.get("session-1") is None
