"""Symmetric encryption for Discord credentials held in the vault."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from dashboard.core.exceptions import StorageError


class CredentialCipher:
    """Encrypt and decrypt stored credentials using a derived Fernet key."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Credential encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, credential: str) -> str:
        return self._fernet.encrypt(credential.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored credential.

        A value that does not decrypt under the current key means the stored
        row is unusable, which is reported as a storage failure.
        """
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise StorageError("Stored credential could not be decrypted.") from exc
        return plaintext.decode("utf-8")


__all__ = ["CredentialCipher"]
