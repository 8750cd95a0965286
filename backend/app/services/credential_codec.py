"""
Storefront Backend - Credential Codec
=======================================

What:  Reversible encryption for email addresses and one-way salted hashing
       for passwords.
How:   `cryptography` primitives:
         - Email: AES-256-CTR, key = PBKDF2-HMAC-SHA512(passphrase, salt,
           1 iteration, 32 bytes), fixed counter block. Ciphertext is hex.
         - Password: PBKDF2-HMAC-SHA512, 1000 iterations, 64-byte output,
           stored as "<hex salt>:<hex hash>".
Who:   AuthService (signup, login).

Deterministic encryption:
    The same plaintext always produces the same ciphertext because the key
    and counter block are fixed. That is what lets the encrypted email be
    used as an exact-match lookup key. It also means equal emails are
    visible as equal ciphertexts to anyone reading the table.

Failure mode:
    Any problem (missing settings, bad counter, malformed ciphertext)
    raises EncryptionError. Nothing ever falls back to returning the
    plaintext.
"""

import logging
import secrets
from typing import Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.config import Settings
from app.exceptions import EncryptionError

logger = logging.getLogger(__name__)

# ── Email key derivation ──────────────────────────────────────────────────
KEY_DERIVATION_ITERATIONS = 1
KEY_LENGTH = 32  # AES-256
COUNTER_BLOCK_SIZE = 16

# ── Password hashing ──────────────────────────────────────────────────────
PASSWORD_ITERATIONS = 1000
PASSWORD_HASH_LENGTH = 64
PASSWORD_SALT_BYTES = 16


def _password_kdf(salt: str) -> PBKDF2HMAC:
    # PBKDF2HMAC instances are single-use.
    return PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=PASSWORD_HASH_LENGTH,
        salt=salt.encode("utf-8"),
        iterations=PASSWORD_ITERATIONS,
    )


class CredentialCodec:
    """
    Encrypts emails and hashes passwords.

    The AES key is derived lazily on first use and cached for the lifetime
    of the instance. Constructing a codec without AES settings is allowed
    (password hashing still works); encrypt/decrypt then raise
    EncryptionError.
    """

    def __init__(
        self,
        passphrase: Optional[str],
        salt: Optional[str],
        counter: Optional[str],
    ):
        self._passphrase = passphrase or ""
        self._salt = salt or ""
        self._counter = counter if counter is not None else ""
        self._key: Optional[bytes] = None
        self._counter_block: Optional[bytes] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialCodec":
        return cls(settings.aes_password, settings.aes_salt, settings.aes_counter)

    @property
    def configured(self) -> bool:
        return bool(self._passphrase and self._salt and str(self._counter).strip())

    def _cipher(self) -> Cipher:
        if self._key is None:
            if not self.configured:
                raise EncryptionError(
                    message="Email encryption is not configured",
                    context={"missing": "AES_PASSWORD/AES_SALT/AES_COUNTER"},
                )
            try:
                counter = int(str(self._counter).strip())
            except ValueError:
                raise EncryptionError(
                    message="Email encryption is misconfigured",
                    context={"reason": "AES_COUNTER is not an integer"},
                )
            if not 0 <= counter <= 0xFFFFFFFF:
                raise EncryptionError(
                    message="Email encryption is misconfigured",
                    context={"reason": "AES_COUNTER must fit in 32 bits"},
                )

            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA512(),
                length=KEY_LENGTH,
                salt=self._salt.encode("utf-8"),
                iterations=KEY_DERIVATION_ITERATIONS,
            )
            self._key = kdf.derive(self._passphrase.encode("utf-8"))
            # 12 zero bytes followed by the counter as a big-endian uint32.
            self._counter_block = bytes(COUNTER_BLOCK_SIZE - 4) + counter.to_bytes(4, "big")

        return Cipher(algorithms.AES(self._key), modes.CTR(self._counter_block))

    def encrypt(self, text: str) -> str:
        """
        Encrypt text deterministically and return lowercase hex.

        Raises:
            EncryptionError: codec not configured or misconfigured.
        """
        encryptor = self._cipher().encryptor()
        data = encryptor.update(text.encode("utf-8")) + encryptor.finalize()
        return data.hex()

    def decrypt(self, ciphertext: str) -> str:
        """
        Inverse of encrypt().

        Raises:
            EncryptionError: codec not configured, ciphertext is not hex, or
                the decrypted bytes are not UTF-8.
        """
        cipher = self._cipher()
        try:
            raw = bytes.fromhex(ciphertext)
        except ValueError:
            raise EncryptionError(
                message="Stored value could not be decrypted",
                context={"reason": "ciphertext is not valid hex"},
            )
        decryptor = cipher.decryptor()
        data = decryptor.update(raw) + decryptor.finalize()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise EncryptionError(
                message="Stored value could not be decrypted",
                context={"reason": "plaintext is not UTF-8"},
            )

    # ── Passwords ─────────────────────────────────────────────────────────

    @staticmethod
    def hash_password(password: str) -> str:
        """Return "salt:hash" with a fresh random salt."""
        salt = secrets.token_hex(PASSWORD_SALT_BYTES)
        digest = _password_kdf(salt).derive(password.encode("utf-8"))
        return f"{salt}:{digest.hex()}"

    @staticmethod
    def compare_password(password: str, stored: str) -> bool:
        """
        Check a password against a stored "salt:hash" value.

        Malformed stored values compare as False. The comparison is
        constant-time (PBKDF2HMAC.verify).
        """
        salt, sep, key = stored.partition(":")
        if not sep or not salt or not key:
            logger.warning("Stored password hash is malformed")
            return False
        try:
            expected = bytes.fromhex(key)
        except ValueError:
            logger.warning("Stored password hash is not valid hex")
            return False
        try:
            _password_kdf(salt).verify(password.encode("utf-8"), expected)
        except InvalidKey:
            return False
        return True
