"""
Encryption utilities for saved connection credentials
"""
import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from dbworks.config import settings

NONCE_SIZE = 12
KEY_SIZE = 32


class Encryptor:
    """AES-256-GCM encryptor. Ciphertexts are base64(nonce || ciphertext)."""

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"ENCRYPTION_KEY must be {KEY_SIZE} bytes (got {len(key)} bytes)")
        self._cipher = AESGCM(key)

    @classmethod
    def from_base64(cls, key_b64: Optional[str]) -> "Encryptor":
        """Build an encryptor from a base64-encoded key."""
        if not key_b64:
            raise ValueError("ENCRYPTION_KEY is not set")
        try:
            key = base64.b64decode(key_b64, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Failed to decode ENCRYPTION_KEY: {e}") from e
        return cls(key)

    @classmethod
    def from_settings(cls) -> "Encryptor":
        return cls.from_base64(settings.ENCRYPTION_KEY)

    @staticmethod
    def generate_key() -> str:
        """Generate a new base64-encoded key suitable for ENCRYPTION_KEY."""
        return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode()

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string value."""
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._cipher.encrypt(nonce, plaintext.encode(), None)
        return base64.b64encode(nonce + ciphertext).decode()

    def decrypt(self, encrypted: str) -> str:
        """Decrypt a value produced by `encrypt`."""
        try:
            combined = base64.b64decode(encrypted, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Failed to decode ciphertext: {e}") from e

        if len(combined) < NONCE_SIZE:
            raise ValueError("Ciphertext too short")

        nonce, ciphertext = combined[:NONCE_SIZE], combined[NONCE_SIZE:]
        try:
            plaintext = self._cipher.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise ValueError("Decryption failed") from e
        return plaintext.decode()
