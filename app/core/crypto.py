"""Symmetric encryption of stored secrets: AES-256-CBC with an HMAC-SHA256 tag (encrypt-then-MAC)."""

import binascii
import os
import re
import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.core.errors import ConfigurationError, DecryptionFailedError

# 32-byte AES key as hex.
ENCRYPTION_KEY_HEX_LENGTH = 64
ENCRYPTION_KEY_PATTERN = re.compile(rf"^[0-9a-fA-F]{{{ENCRYPTION_KEY_HEX_LENGTH}}}$")

IV_SIZE = 16
TAG_SIZE = 32
BLOCK_SIZE_BITS = 128

# HKDF context for the MAC subkey; changing it invalidates every stored tag.
_MAC_KEY_INFO = b"credential-vault/hmac-sha256"


@dataclass(frozen=True)
class EncryptedValue:
    """Hex-encoded ciphertext (with trailing tag) and the IV it was produced under."""

    ciphertext: str
    iv: str


def generate_encryption_key() -> str:
    """Return a fresh random 32-byte key as 64 hex characters (for ENCRYPTION_KEY)."""
    return secrets.token_hex(ENCRYPTION_KEY_HEX_LENGTH // 2)


def _parse_key(key_hex: str | None) -> bytes:
    if not key_hex:
        raise ConfigurationError("ENCRYPTION_KEY is not configured")
    if not ENCRYPTION_KEY_PATTERN.match(key_hex):
        raise ConfigurationError(
            f"ENCRYPTION_KEY must be {ENCRYPTION_KEY_HEX_LENGTH} hex characters (32 bytes)"
        )
    return bytes.fromhex(key_hex)


class SecretCipher:
    """
    Encrypt and decrypt individual secret values with a static 256-bit key.

    Every encrypt call draws a new random 16-byte IV. The stored ciphertext is
    AES-CBC output followed by an HMAC-SHA256 tag over iv || ciphertext, so
    decrypting with the wrong IV, a corrupted row or the wrong key always fails
    with DecryptionFailedError instead of returning garbage.
    """

    def __init__(self, key_hex: str | None) -> None:
        self._enc_key = _parse_key(key_hex)
        self._mac_key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=_MAC_KEY_INFO,
        ).derive(self._enc_key)

    def _tag(self, iv: bytes, ciphertext: bytes) -> hmac.HMAC:
        h = hmac.HMAC(self._mac_key, hashes.SHA256())
        h.update(iv)
        h.update(ciphertext)
        return h

    def encrypt(self, plaintext: str) -> EncryptedValue:
        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._enc_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        tag = self._tag(iv, ciphertext).finalize()
        return EncryptedValue(ciphertext=(ciphertext + tag).hex(), iv=iv.hex())

    def decrypt(self, ciphertext: str, iv: str) -> str:
        try:
            raw = bytes.fromhex(ciphertext)
            iv_bytes = bytes.fromhex(iv)
        except (ValueError, TypeError, binascii.Error) as exc:
            raise DecryptionFailedError("Stored secret is not valid hex") from exc

        if len(iv_bytes) != IV_SIZE:
            raise DecryptionFailedError("Stored IV has the wrong length")
        body, tag = raw[:-TAG_SIZE], raw[-TAG_SIZE:]
        if len(raw) < TAG_SIZE + IV_SIZE or len(body) % IV_SIZE:
            raise DecryptionFailedError("Stored ciphertext is truncated")

        try:
            self._tag(iv_bytes, body).verify(tag)
        except InvalidSignature as exc:
            raise DecryptionFailedError("Integrity check failed") from exc

        decryptor = Cipher(algorithms.AES(self._enc_key), modes.CBC(iv_bytes)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecryptionFailedError("Decrypted payload is malformed") from exc
