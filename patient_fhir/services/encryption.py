"""
Application-layer encryption for PHI held by the record store.

The key comes from settings; outside production a throwaway key is
generated so local runs and tests work without secrets.
"""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet

from patient_fhir.config import settings

logger = logging.getLogger(__name__)


class EncryptionService:
    """Wraps Fernet symmetric encryption for PHI fields."""

    def __init__(self, key: str | bytes | None = None, environment: str | None = None):
        raw_key = key or settings.PHI_ENCRYPTION_KEY
        environment = environment or settings.ENVIRONMENT
        if not raw_key:
            if environment == "production":
                raise RuntimeError("PHI_ENCRYPTION_KEY must be set in production")
            logger.warning("No PHI_ENCRYPTION_KEY configured; using an ephemeral key")
            raw_key = Fernet.generate_key()
        self._fernet = Fernet(raw_key.encode() if isinstance(raw_key, str) else raw_key)

    def encrypt(self, plaintext: str | None) -> str | None:
        """Encrypt a string; empty values are stored as NULL."""
        if not plaintext:
            return None
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str | None) -> str:
        if not ciphertext:
            return ""
        return self._fernet.decrypt(ciphertext.encode()).decode()
