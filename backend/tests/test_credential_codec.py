"""
Storefront Backend - Credential Codec Unit Tests
==================================================

What:  Email encryption and password hashing.

What we test:
    ✅ encrypt/decrypt round trip, deterministic ciphertext
    ✅ missing or malformed settings raise EncryptionError
    ✅ password hash verifies; wrong or malformed hashes do not
"""

import pytest

from app.exceptions import EncryptionError
from app.services.credential_codec import CredentialCodec


class TestEmailEncryption:
    def setup_method(self):
        self.codec = CredentialCodec("passphrase", "salt", "7")

    def test_decrypt_inverts_encrypt(self):
        ciphertext = self.codec.encrypt("ada@example.com")
        assert ciphertext != "ada@example.com"
        assert self.codec.decrypt(ciphertext) == "ada@example.com"

    def test_ciphertext_is_deterministic_hex(self):
        """Equal emails must map to equal ciphertexts so they can be looked up."""
        first = self.codec.encrypt("ada@example.com")
        second = CredentialCodec("passphrase", "salt", "7").encrypt("ada@example.com")
        assert first == second
        assert int(first, 16) >= 0
        assert len(first) == 2 * len("ada@example.com")

    def test_different_counter_changes_ciphertext(self):
        other = CredentialCodec("passphrase", "salt", "8")
        assert other.encrypt("ada@example.com") != self.codec.encrypt("ada@example.com")

    def test_unicode_round_trip(self):
        assert self.codec.decrypt(self.codec.encrypt("zoë@exämple.com")) == "zoë@exämple.com"

    def test_missing_configuration_raises(self):
        codec = CredentialCodec("", "salt", "7")
        assert codec.configured is False
        with pytest.raises(EncryptionError, match="not configured"):
            codec.encrypt("ada@example.com")

    def test_non_integer_counter_raises(self):
        codec = CredentialCodec("passphrase", "salt", "seven")
        with pytest.raises(EncryptionError, match="misconfigured"):
            codec.encrypt("ada@example.com")

    def test_decrypt_rejects_non_hex(self):
        with pytest.raises(EncryptionError, match="could not be decrypted"):
            self.codec.decrypt("not-hex!")

    def test_from_settings(self, test_settings):
        codec = CredentialCodec.from_settings(test_settings)
        assert codec.configured
        assert codec.decrypt(codec.encrypt("x@example.com")) == "x@example.com"


class TestPasswordHashing:
    def test_hash_verifies(self):
        stored = CredentialCodec.hash_password("s3cret")
        assert CredentialCodec.compare_password("s3cret", stored) is True

    def test_wrong_password_fails(self):
        stored = CredentialCodec.hash_password("s3cret")
        assert CredentialCodec.compare_password("s3cret!", stored) is False

    def test_hash_format_and_random_salt(self):
        first = CredentialCodec.hash_password("s3cret")
        second = CredentialCodec.hash_password("s3cret")
        salt, _, digest = first.partition(":")
        assert len(salt) == 32
        assert len(digest) == 128
        assert first != second

    @pytest.mark.parametrize("stored", ["", "nocolon", ":abcd", "salt:", "salt:zz"])
    def test_malformed_stored_value_fails(self, stored):
        assert CredentialCodec.compare_password("s3cret", stored) is False
