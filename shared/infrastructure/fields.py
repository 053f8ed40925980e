"""
Custom Django model fields for sensitive data.

Provides EncryptedTextField that transparently encrypts data
before saving to database and decrypts when loading.
"""

import logging

from cryptography.fernet import InvalidToken
from django.db import models

from .encryption import encrypt_string, decrypt_string

logger = logging.getLogger(__name__)


class EncryptedTextField(models.TextField):
    """
    TextField that automatically encrypts data before saving
    and decrypts when loading.
    """

    description = "Encrypted text field"

    def from_db_value(self, value, expression, connection):
        """Decrypt when loading from database."""
        if value is None:
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            # Rotated key: the stored ciphertext can no longer be read.
            logger.warning(f"Could not decrypt {self.model.__name__}.{self.name}; returning empty value")
            return ''

    def get_prep_value(self, value):
        """Encrypt before saving to database."""
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)
