"""Tests for stored-credential encryption."""

import pytest

from brandscope.core.encryption import decrypt_credential, encrypt_credential
from brandscope.core.exceptions import ConfigurationError

OTHER_FERNET_KEY = "3q5Vq1YQm0B2a8Xv6T1l9y0c4n7w2k5j8h1g4f7d0s0="


class TestCredentials:
    def test_encrypt_decrypt(self):
        token = encrypt_credential("sk-live-123")
        assert token != b"sk-live-123"
        assert decrypt_credential(token, "openai") == "sk-live-123"

    def test_empty_column(self):
        assert decrypt_credential(None) == ""
        assert decrypt_credential(b"") == ""

    def test_missing_key(self, set_fernet_key):
        set_fernet_key("")
        with pytest.raises(ConfigurationError, match="FERNET_KEY is not configured"):
            encrypt_credential("sk-live-123")

    def test_malformed_key(self, set_fernet_key):
        set_fernet_key("not-a-fernet-key")
        with pytest.raises(ConfigurationError, match="FERNET_KEY is malformed"):
            decrypt_credential(b"gAAAAA-anything", "openai")

    def test_rotated_key(self, set_fernet_key):
        token = encrypt_credential("sk-live-123")
        set_fernet_key(OTHER_FERNET_KEY)
        with pytest.raises(ConfigurationError, match="provider 'openai' cannot be decrypted"):
            decrypt_credential(token, "openai")
