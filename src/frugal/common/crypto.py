"""Cryptographic utilities for credential storage and display."""

from __future__ import annotations

import base64
import hashlib
import os

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


# Display

MASK_VISIBLE_CHARS = 4


def mask_secret(secret: str, visible: int = MASK_VISIBLE_CHARS) -> str:
    """
    Redact a credential for display.

    Keeps the first and last ``visible`` characters (e.g. ``gsk_...9f2a``).
    Short secrets are fully redacted so the mask never reveals most of a key.
    """
    if len(secret) <= visible * 2:
        return "*" * len(secret)
    return f"{secret[:visible]}...{secret[-visible:]}"


def fingerprint(secret: str) -> str:
    """Stable short identifier for a credential, safe to log."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()[:12]


# Credential Encryption at Rest

_ENCRYPTION_KEY: bytes | None = None


def _get_encryption_key() -> bytes:
    """Derive a Fernet key from FRUGAL_ENCRYPTION_KEY env var."""
    global _ENCRYPTION_KEY  # noqa: PLW0603
    if _ENCRYPTION_KEY is not None:
        return _ENCRYPTION_KEY

    master = os.environ.get("FRUGAL_ENCRYPTION_KEY", "frugal-dev-encryption-key")
    salt = os.environ.get("FRUGAL_ENCRYPTION_SALT", "frugal-salt").encode()

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=480_000,
    )
    _ENCRYPTION_KEY = base64.urlsafe_b64encode(kdf.derive(master.encode()))
    return _ENCRYPTION_KEY


def encrypt_value(plaintext: str) -> str:
    """Encrypt a string (e.g., provider API key) for durable storage."""
    f = Fernet(_get_encryption_key())
    return f.encrypt(plaintext.encode()).decode()


def decrypt_value(ciphertext: str) -> str:
    """
    Decrypt a string from durable storage.

    Raises ValueError if the ciphertext was produced with a different key
    or has been tampered with.
    """
    f = Fernet(_get_encryption_key())
    try:
        return f.decrypt(ciphertext.encode()).decode()
    except InvalidToken as e:
        raise ValueError("credential ciphertext could not be decrypted") from e
