"""Tests for the environment drift detection script."""

from __future__ import annotations

from pathlib import Path

import pytest

from scripts import check_env

MANAGED_ENV_KEYS = [
    "DISCORD_CLIENT_ID",
    "DISCORD_CLIENT_SECRET",
    "DISCORD_REDIRECT_URI",
    "JWT_SECRET",
    "CREDENTIAL_ENCRYPTION_SECRET",
    "EXTERNAL_API_SECRET",
    "ADMIN_DISCORD_IDS",
]

STRONG_VALUES = {
    "DISCORD_CLIENT_ID": "abc",
    "DISCORD_CLIENT_SECRET": "secret",
    "DISCORD_REDIRECT_URI": "https://example.com/auth/callback",
    "JWT_SECRET": "j" * 40,
    "CREDENTIAL_ENCRYPTION_SECRET": "v" * 40,
    "EXTERNAL_API_SECRET": "e" * 40,
    "ADMIN_DISCORD_IDS": "1001",
}


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_managed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("command", ["record", "verify", "check"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    env_file = tmp_path / ".missing-env"
    hash_file = tmp_path / ".env.sha256"

    argv = [command, "--env-file", str(env_file)]
    if command != "check":
        argv.extend(["--hash-file", str(hash_file)])

    exit_code = check_env.main(argv)
    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_record_and_verify_detects_mismatched_checksum(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"

    _clear_managed_env(monkeypatch)
    _write_env(env_file, **STRONG_VALUES)

    exit_code = check_env.main(
        [
            "record",
            "--env-file",
            str(env_file),
            "--hash-file",
            str(hash_file),
        ]
    )
    assert exit_code == check_env.EXIT_OK
    baseline = hash_file.read_text(encoding="utf-8").strip()
    assert baseline

    _clear_managed_env(monkeypatch)
    exit_code = check_env.main(
        [
            "verify",
            "--env-file",
            str(env_file),
            "--hash-file",
            str(hash_file),
        ]
    )
    assert exit_code == check_env.EXIT_OK

    _write_env(env_file, **{**STRONG_VALUES, "JWT_SECRET": "k" * 40})

    _clear_managed_env(monkeypatch)
    exit_code = check_env.main(
        [
            "verify",
            "--env-file",
            str(env_file),
            "--hash-file",
            str(hash_file),
        ]
    )
    assert exit_code == check_env.EXIT_CHECKSUM_ERROR


def test_validation_failure_for_missing_required_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"

    _clear_managed_env(monkeypatch)
    values = dict(STRONG_VALUES)
    del values["JWT_SECRET"]
    _write_env(env_file, **values)

    exit_code = check_env.main(
        [
            "record",
            "--env-file",
            str(env_file),
            "--hash-file",
            str(hash_file),
        ]
    )
    assert exit_code == check_env.EXIT_VALIDATION_ERROR
    assert not hash_file.exists()


def test_strict_check_fails_on_weak_configuration(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"

    _clear_managed_env(monkeypatch)
    values = dict(STRONG_VALUES)
    values["JWT_SECRET"] = "short"
    del values["CREDENTIAL_ENCRYPTION_SECRET"]
    _write_env(env_file, **values)

    assert check_env.main(["check", "--env-file", str(env_file)]) == check_env.EXIT_OK

    _clear_managed_env(monkeypatch)
    exit_code = check_env.main(["check", "--strict", "--env-file", str(env_file)])
    assert exit_code == check_env.EXIT_WEAK_CONFIG


def test_audit_reports_each_weakness(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"

    _clear_managed_env(monkeypatch)
    values = dict(STRONG_VALUES)
    values["CREDENTIAL_ENCRYPTION_SECRET"] = values["JWT_SECRET"]
    values["EXTERNAL_API_SECRET"] = "short"
    del values["ADMIN_DISCORD_IDS"]
    _write_env(env_file, **values)

    findings = check_env.audit_settings(check_env._load_settings(env_file))

    assert len(findings) == 3
    assert any("EXTERNAL_API_SECRET" in finding for finding in findings)
    assert any("reuses JWT_SECRET" in finding for finding in findings)
    assert any("ADMIN_DISCORD_IDS" in finding for finding in findings)


def test_strong_configuration_has_no_findings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"

    _clear_managed_env(monkeypatch)
    _write_env(env_file, **STRONG_VALUES)

    assert check_env.audit_settings(check_env._load_settings(env_file)) == []
