"""
Encryption utilities

Provides encryption/decryption for sensitive free text such as the
check-in instructions a host shares with a confirmed guest.
Uses Fernet symmetric encryption (AES-128-CBC + HMAC-SHA256).
"""

import base64
import hashlib

from cryptography.fernet import Fernet
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def get_encryption_key() -> bytes:
    """
    Get encryption key from settings

    Any configured string is stretched with SHA-256 into a
    URL-safe base64-encoded 32-byte Fernet key.
    """
    key = getattr(settings, 'ENCRYPTION_KEY', None)

    if not key:
        raise ImproperlyConfigured(
            "ENCRYPTION_KEY not configured in settings. "
            "Generate one with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
        )

    if isinstance(key, str):
        key = base64.urlsafe_b64encode(
            hashlib.sha256(key.encode()).digest()
        )

    return key


def encrypt_string(plaintext: str) -> str:
    """Encrypt a string and return the Fernet token as text."""
    if not plaintext:
        return ''

    fernet = Fernet(get_encryption_key())
    return fernet.encrypt(plaintext.encode()).decode()


def decrypt_string(encrypted: str) -> str:
    """Decrypt a Fernet token produced by ``encrypt_string``."""
    if not encrypted:
        return ''

    fernet = Fernet(get_encryption_key())
    return fernet.decrypt(encrypted.encode()).decode()
