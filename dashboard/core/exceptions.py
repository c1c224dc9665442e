"""
Error taxonomy for the dashboard trust core.

Every rejection raised by the login, session, vault and capability-token
services derives from :class:`DashboardError`, so the HTTP layer can map each
kind to a status code without inspecting messages.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all trust-core failures."""


class InvalidTokenError(DashboardError):
    """Session token is malformed, expired, or carries a bad signature."""


class ExchangeFailedError(DashboardError):
    """The identity provider rejected or failed the authorization code exchange."""


class ProfileFetchFailedError(DashboardError):
    """The identity provider profile call failed."""


class CredentialMissingError(DashboardError):
    """Session is valid but no live Discord credential is stored for it."""


class IdentityNotFoundError(DashboardError):
    """Session token refers to an identity that no longer exists."""


class ForbiddenError(DashboardError):
    """Authenticated identity lacks admin privileges."""


class InvalidExpiryError(DashboardError):
    """Requested resource-link expiry is not in the future."""


class InvalidResourcePathError(DashboardError):
    """Resource path cannot be normalized into a CDN path."""


class StorageError(DashboardError):
    """Underlying persistence layer failed."""


__all__ = [
    "CredentialMissingError",
    "DashboardError",
    "ExchangeFailedError",
    "ForbiddenError",
    "IdentityNotFoundError",
    "InvalidExpiryError",
    "InvalidResourcePathError",
    "InvalidTokenError",
    "ProfileFetchFailedError",
    "StorageError",
]
