"""Verify that the dashboard backend's environment configuration is intact.

The tool performs three checks:

1. It instantiates ``AppSettings`` from the provided ``.env`` file, surfacing
   missing Discord OAuth, JWT or CDN secrets before login and link signing
   start failing at request time.
2. It audits the loaded values for weak trust settings: short signing
   secrets, the vault key silently falling back to the JWT secret, and an
   empty admin list. With ``--strict`` any finding fails the run.
3. It can record and verify a checksum for the ``.env`` file so unexpected
   edits (for example, rotating a secret by accident) are detected.

Example usages::

    python -m scripts.check_env check --strict --env-file /srv/dashboard/.env

    python -m scripts.check_env record --env-file /srv/dashboard/.env \
        --hash-file /srv/dashboard/.env.sha256

    python -m scripts.check_env verify --env-file /srv/dashboard/.env \
        --hash-file /srv/dashboard/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from pydantic import ValidationError

from dashboard.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_WEAK_CONFIG = 4
EXIT_RUNTIME_ERROR = 5

# HS256 keys shorter than the digest size weaken session signatures.
MIN_SECRET_BYTES = 32


def _load_settings(env_file: Path) -> AppSettings:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def audit_settings(settings: AppSettings) -> list[str]:
    """Return human-readable findings about weak trust configuration."""
    findings: list[str] = []
    security = settings.security

    if len(security.jwt_secret.encode("utf-8")) < MIN_SECRET_BYTES:
        findings.append(f"JWT_SECRET is shorter than {MIN_SECRET_BYTES} bytes.")
    if len(settings.external_api.secret.encode("utf-8")) < MIN_SECRET_BYTES:
        findings.append(f"EXTERNAL_API_SECRET is shorter than {MIN_SECRET_BYTES} bytes.")
    if not security.credential_encryption_secret:
        findings.append(
            "CREDENTIAL_ENCRYPTION_SECRET is unset; stored Discord tokens are "
            "encrypted with JWT_SECRET."
        )
    elif security.credential_encryption_secret == security.jwt_secret:
        findings.append("CREDENTIAL_ENCRYPTION_SECRET reuses JWT_SECRET.")
    if not security.admin_discord_ids:
        findings.append("ADMIN_DISCORD_IDS is empty; file management is unreachable.")
    return findings


def _checksum(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    checksum = _checksum(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _checksum(env_file)
    if expected != actual:
        print(
            "Environment checksum mismatch!\n"
            f"  expected: {expected}\n"
            f"  actual:   {actual}\n"
            "A changed JWT or CDN secret invalidates every issued session and link.",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print("Environment checksum OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        help="Fail when the security audit reports any finding.",
    )

    parser = argparse.ArgumentParser(
        description="Validate dashboard settings, audit secrets and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser(
        "check", parents=[common], help="Validate and audit settings only."
    )
    for command, help_text in (
        ("record", "Validate settings and store the checksum baseline."),
        ("verify", "Validate settings and compare the checksum with the baseline."),
    ):
        subparser = subparsers.add_parser(command, parents=[common], help=help_text)
        subparser.add_argument("--hash-file", required=True, type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    try:
        settings = _load_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    findings = audit_settings(settings)
    for finding in findings:
        print(f"warning: {finding}", file=sys.stderr)
    if findings and args.strict:
        return EXIT_WEAK_CONFIG

    if args.command == "record":
        return _record_checksum(env_file, args.hash_file)
    if args.command == "verify":
        return _verify_checksum(env_file, args.hash_file)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
