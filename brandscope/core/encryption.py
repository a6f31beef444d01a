"""Stored provider credentials, encrypted at rest with Fernet.

A missing or malformed ``FERNET_KEY`` and a credential that no longer
decrypts are both configuration problems of the provider, so they surface
as ``ConfigurationError`` like any other bad credential.
"""

import binascii
import logging

from cryptography.fernet import Fernet, InvalidToken

from brandscope.core.config import settings
from brandscope.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_fernet: Fernet | None = None


def _get_fernet() -> Fernet:
    global _fernet
    if _fernet is None:
        key = settings.fernet_key
        if not key:
            raise ConfigurationError("FERNET_KEY is not configured, stored provider credentials are unreadable")
        try:
            _fernet = Fernet(key.encode() if isinstance(key, str) else key)
        except (ValueError, binascii.Error) as e:
            raise ConfigurationError(f"FERNET_KEY is malformed: {e}") from e
    return _fernet


def reset_cipher() -> None:
    """Drop the cached cipher so the next call re-reads ``settings.fernet_key``."""
    global _fernet
    _fernet = None


def encrypt_credential(plaintext: str) -> bytes:
    """Encrypt a provider API key for the ``ai_providers.api_key`` column."""
    return _get_fernet().encrypt(plaintext.encode("utf-8"))


def decrypt_credential(ciphertext: bytes | None, provider: str = "") -> str:
    """Decrypt a stored provider API key. An empty column gives ``""``."""
    if not ciphertext:
        return ""
    try:
        return _get_fernet().decrypt(ciphertext).decode("utf-8")
    except InvalidToken as e:
        logger.error("Stored credential of provider '%s' cannot be decrypted", provider, extra={"provider": provider})
        raise ConfigurationError(
            f"Stored API key for provider '{provider}' cannot be decrypted with the configured FERNET_KEY"
        ) from e
