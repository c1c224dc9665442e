"""Service layer exports."""

from .access_authority import AccessAuthority, FileViewerToken, LoginResult, ResourceLink
from .capability_tokens import CapabilityToken, CapabilityTokenSigner, normalize_resource_path
from .credential_cipher import CredentialCipher
from .credential_vault import CredentialSweeper, CredentialVault
from .session_tokens import SessionTokenIssuer

__all__ = [
    "AccessAuthority",
    "CapabilityToken",
    "CapabilityTokenSigner",
    "CredentialCipher",
    "CredentialSweeper",
    "CredentialVault",
    "FileViewerToken",
    "LoginResult",
    "ResourceLink",
    "SessionTokenIssuer",
    "normalize_resource_path",
]
