"""
Keyed-Derivation Envelope Service
=================================

Derives a fresh AES key per operation from a long-term secret and a
random salt, then seals the payload with AES-GCM.

Envelope Layout:
    SALT (16) | NONCE (12) | CIPHERTEXT | TAG (16)

Key Derivation:
    aes_key = SHAKE256(secret || salt || "KMAC-AES-KEY-DERIVATION")[:aes_key_size]
"""

from __future__ import annotations

import hashlib
import secrets

from hycrypt.core.constants import (
    AES_KEY_SIZES,
    ALGORITHM_KMAC,
    KMAC_CONTEXT_LABEL,
    KMAC_SALT_SIZE,
)
from hycrypt.core.crypto import aes_gcm
from hycrypt.core.crypto.service import EnvelopeService
from hycrypt.core.errors import (
    IntegrityError,
    InvalidConfigError,
    InvalidFormatError,
    decryption_failed,
    encryption_failed,
    key_not_found,
)
from hycrypt.core.memory import ZeroizeContext


class KmacEnvelopeService(EnvelopeService):
    """
    Symmetric envelope service keyed by a shared secret.

    Usage:
        service = KmacEnvelopeService(secret, key_size=32, aes_key_size=32)
        envelope = service.encrypt(b"test")   # 16 + 12 + 4 + 16 = 48 bytes
        service.decrypt(envelope)

    Security Notes:
        - Salt is random per encryption, so every envelope uses a new key
        - Derived keys are zeroed as soon as the call finishes
    """

    __slots__ = ("_secret", "_aes_key_size")

    algorithm = ALGORITHM_KMAC

    def __init__(self, secret: bytes, key_size: int = 32, aes_key_size: int = 32) -> None:
        """
        Initialize the service.

        Args:
            secret: Long-term symmetric secret
            key_size: Configured secret length; must equal len(secret)
            aes_key_size: Length of the derived AES key (16, 24 or 32)

        Raises:
            InvalidConfigError: On a length mismatch or invalid AES key size
        """
        if len(secret) != key_size:
            raise InvalidConfigError(
                "KMAC key length mismatch", expected=key_size, actual=len(secret)
            )
        if aes_key_size not in AES_KEY_SIZES:
            raise InvalidConfigError(
                "AES key size must be 16, 24 or 32 bytes", aes_key_size=aes_key_size
            )
        self._secret = bytes(secret)
        self._aes_key_size = aes_key_size

    def derive_key(self, salt: bytes) -> bytearray:
        """
        Derive the per-operation AES key for ``salt``.

        The caller owns the returned buffer and must zero it.
        """
        xof = hashlib.shake_256()
        xof.update(self._secret)
        xof.update(salt)
        xof.update(KMAC_CONTEXT_LABEL)
        return bytearray(xof.digest(self._aes_key_size))

    def validate_keys(self) -> None:
        if not self._secret:
            raise key_not_found(self.algorithm, "config")

    def encrypt(self, plaintext: bytes) -> bytes:
        salt = secrets.token_bytes(KMAC_SALT_SIZE)
        key = self.derive_key(salt)
        with ZeroizeContext(key):
            try:
                sealed = aes_gcm.seal(key, plaintext)
            except ValueError as e:
                raise encryption_failed(self.algorithm, e) from e
        return salt + sealed

    def decrypt(self, envelope: bytes) -> bytes:
        """
        Decrypt a keyed-derivation envelope.

        Raises:
            InvalidFormatError: If the envelope is shorter than the salt
            DecryptionFailedError: If authentication fails
        """
        if len(envelope) < KMAC_SALT_SIZE:
            raise InvalidFormatError("invalid kmac encrypted data format", format="kmac")

        salt = envelope[:KMAC_SALT_SIZE]
        key = self.derive_key(salt)
        with ZeroizeContext(key):
            try:
                return aes_gcm.open_sealed(key, envelope[KMAC_SALT_SIZE:])
            except (IntegrityError, ValueError) as e:
                raise decryption_failed(self.algorithm) from e

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"KmacEnvelopeService(key_len={len(self._secret)}, aes_len={self._aes_key_size})"
