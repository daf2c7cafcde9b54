"""
Backend — Secret Encryption
=============================

AES-256-GCM encryption for GitHub tokens and cloud credentials at rest.

Ciphertext format:
    <iv hex>:<auth tag hex>:<ciphertext hex>

The key is derived from ENCRYPTION_KEY with scrypt (salt ``salt``,
32 bytes). GitHub tokens are bound to the associated data
``github-token``; cloud credentials carry no associated data.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

logger = logging.getLogger("backend.crypto")

KEY_SALT = b"salt"
KEY_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16
GITHUB_TOKEN_AAD = b"github-token"


class EncryptionError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


def derive_key(secret: str) -> bytes:
    kdf = Scrypt(salt=KEY_SALT, length=KEY_LENGTH, n=2**14, r=8, p=1)
    return kdf.derive(secret.encode("utf-8"))


class TokenCipher:
    """Encrypts and decrypts secrets with a key derived from *secret*."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise EncryptionError("Encryption key cannot be empty")
        self._aead = AESGCM(derive_key(secret))

    # ── Raw ──────────────────────────────────────────────────────────
    def encrypt(self, text: str, aad: Optional[bytes] = None) -> str:
        iv = os.urandom(IV_LENGTH)
        sealed = self._aead.encrypt(iv, text.encode("utf-8"), aad)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, payload: str, aad: Optional[bytes] = None) -> str:
        parts = payload.split(":")
        if len(parts) != 3:
            raise EncryptionError("Invalid encrypted text format")

        try:
            iv, tag, ciphertext = (bytes.fromhex(p) for p in parts)
        except ValueError:
            raise EncryptionError("Invalid encrypted text format") from None

        if len(tag) != TAG_LENGTH or not iv:
            raise EncryptionError("Invalid encrypted text format")

        try:
            plain = self._aead.decrypt(iv, ciphertext + tag, aad)
        except (InvalidTag, ValueError):
            logger.warning("Decryption failed: authentication tag mismatch")
            raise EncryptionError("Failed to decrypt value") from None
        return plain.decode("utf-8")

    # ── GitHub tokens ────────────────────────────────────────────────
    def encrypt_github_token(self, token: str) -> str:
        if not token or not token.strip():
            raise EncryptionError("Token cannot be empty")
        return self.encrypt(token, GITHUB_TOKEN_AAD)

    def decrypt_github_token(self, encrypted: str) -> str:
        if not encrypted or not encrypted.strip():
            raise EncryptionError("Encrypted token cannot be empty")
        return self.decrypt(encrypted, GITHUB_TOKEN_AAD)

    # ── Cloud credentials ────────────────────────────────────────────
    def encrypt_credentials(self, credentials: dict[str, Any]) -> str:
        try:
            text = json.dumps(credentials)
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Failed to encrypt credentials: {exc}") from exc
        return self.encrypt(text)

    def decrypt_credentials(self, encrypted: str) -> dict[str, Any]:
        text = self.decrypt(encrypted)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise EncryptionError("Failed to decrypt credentials") from exc
        if not isinstance(data, dict):
            raise EncryptionError("Failed to decrypt credentials")
        return data
