"""
RSA Hybrid Envelope Service
===========================

Encrypts small payloads directly with RSA-OAEP and falls back to a
hybrid envelope (RSA-wrapped random AES key + AES-GCM) when the payload
does not fit the modulus.

Envelope Layouts:
    Direct:
        OAEP_CIPHERTEXT (modulus size)
    Hybrid:
        KEY_LEN (4, big-endian) | OAEP(session_key) (KEY_LEN) |
        NONCE (12) | CIPHERTEXT | TAG (16)

Encryption Flow:
    plaintext
        ↓ RSA-OAEP(SHA-256)           (fits)
    direct envelope
        ↓ otherwise: random session key (zeroed after use)
        ↓ RSA-OAEP(session key), AES-GCM(plaintext)
    hybrid envelope

WARNING:
    - Hybrid vs. direct is sniffed from the length prefix on decrypt. A
      direct ciphertext whose first four bytes happen to read as a small
      length is misclassified and fails to decrypt (roughly 2^-22 odds
      for a 2048-bit key).
    - Any failure = generic DecryptionFailedError (no oracle)
"""

from __future__ import annotations

import logging
import secrets
import struct
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from hycrypt.core.constants import (
    AES_KEY_SIZES,
    ALGORITHM_RSA,
    HYBRID_LENGTH_PREFIX_SIZE,
    HYBRID_MAX_WRAPPED_KEY_SIZE,
)
from hycrypt.core.crypto import aes_gcm
from hycrypt.core.crypto.keystore import load_private_key, load_public_key
from hycrypt.core.crypto.service import EnvelopeService
from hycrypt.core.errors import (
    HycryptError,
    IntegrityError,
    InvalidConfigError,
    decryption_failed,
    encryption_failed,
    key_not_found,
)
from hycrypt.core.memory import ZeroizeContext

_log = logging.getLogger("hycrypt.crypto.rsa")

_LENGTH_PREFIX = struct.Struct(">I")
_OAEP_HASH_SIZE = hashes.SHA256.digest_size


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def is_hybrid_envelope(data: bytes) -> bool:
    """
    Classify an envelope as hybrid by sniffing its length prefix.

    The first four bytes, read big-endian, must give ``k`` with
    ``0 < k < len(data)`` and ``k <= 1024``.
    """
    if len(data) <= HYBRID_LENGTH_PREFIX_SIZE:
        return False
    (key_len,) = _LENGTH_PREFIX.unpack_from(data)
    return 0 < key_len < len(data) and key_len <= HYBRID_MAX_WRAPPED_KEY_SIZE


class RsaEnvelopeService(EnvelopeService):
    """
    RSA-OAEP envelope service with AES-GCM hybrid fallback.

    Usage:
        service = RsaEnvelopeService(public_key, private_key, aes_key_size=32)

        envelope = service.encrypt(b"hello")
        plaintext = service.decrypt(envelope)

    Security Notes:
        - A private key is only needed for decrypt()
        - Session keys are generated per call and zeroed after use
        - Keys are read-only after construction (thread-safe)
    """

    __slots__ = ("_public_key", "_private_key", "_aes_key_size", "_private_key_path")

    algorithm = ALGORITHM_RSA

    def __init__(
        self,
        public_key: Optional[rsa.RSAPublicKey],
        private_key: Optional[rsa.RSAPrivateKey] = None,
        aes_key_size: int = 32,
        private_key_path: Optional[str] = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            public_key: RSA public key (required for encrypt)
            private_key: RSA private key (required only for decrypt)
            aes_key_size: Session key length for hybrid mode (16, 24 or 32)
            private_key_path: Where the private key was expected (for errors)
        """
        if aes_key_size not in AES_KEY_SIZES:
            raise InvalidConfigError(
                "AES key size must be 16, 24 or 32 bytes", aes_key_size=aes_key_size
            )
        self._public_key = public_key
        self._private_key = private_key
        self._aes_key_size = aes_key_size
        self._private_key_path = private_key_path

    @classmethod
    def from_key_files(
        cls,
        public_key_path: Path | str,
        private_key_path: Optional[Path | str] = None,
        aes_key_size: int = 32,
    ) -> "RsaEnvelopeService":
        """
        Build the service from PEM key files.

        The public key is mandatory. The private key is optional: a
        missing or unreadable private key leaves the service encrypt-only.

        Raises:
            KeyNotFoundError: If the public key file cannot be read
            InvalidFormatError: If the public key is not an RSA PEM key
        """
        public_key = load_public_key(public_key_path)

        private_key = None
        if private_key_path is not None:
            try:
                private_key = load_private_key(private_key_path)
            except HycryptError as e:
                _log.warning("Private key unavailable, service is encrypt-only: %s", e.message)

        return cls(
            public_key,
            private_key,
            aes_key_size=aes_key_size,
            private_key_path=str(private_key_path) if private_key_path else None,
        )

    @property
    def has_private_key(self) -> bool:
        return self._private_key is not None

    @property
    def key_size(self) -> int:
        """RSA modulus size in bits."""
        self.validate_keys()
        return self._public_key.key_size

    @property
    def max_direct_plaintext(self) -> int:
        """Largest plaintext that RSA-OAEP(SHA-256) can encrypt directly."""
        return self.key_size // 8 - 2 * _OAEP_HASH_SIZE - 2

    def validate_keys(self) -> None:
        if self._public_key is None:
            raise key_not_found("public")

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt plaintext into a direct or hybrid envelope.

        Raises:
            KeyNotFoundError: If no public key is loaded
            EncryptionFailedError: If encryption fails
        """
        self.validate_keys()
        try:
            return self._public_key.encrypt(plaintext, _oaep())
        except ValueError:
            # Too large for the modulus
            pass

        _log.debug("Payload of %d bytes exceeds RSA limit, using hybrid envelope", len(plaintext))
        return self._encrypt_hybrid(plaintext)

    def _encrypt_hybrid(self, plaintext: bytes) -> bytes:
        session_key = bytearray(secrets.token_bytes(self._aes_key_size))
        with ZeroizeContext(session_key):
            try:
                wrapped_key = self._public_key.encrypt(bytes(session_key), _oaep())
                sealed = aes_gcm.seal(session_key, plaintext)
            except ValueError as e:
                raise encryption_failed(self.algorithm, e) from e

        return _LENGTH_PREFIX.pack(len(wrapped_key)) + wrapped_key + sealed

    def decrypt(self, envelope: bytes) -> bytes:
        """
        Decrypt a direct or hybrid envelope.

        Raises:
            KeyNotFoundError: If no private key is loaded
            DecryptionFailedError: On any cryptographic failure
        """
        if self._private_key is None:
            raise key_not_found("private", self._private_key_path)

        try:
            if is_hybrid_envelope(envelope):
                return self._decrypt_hybrid(envelope)
            return self._private_key.decrypt(envelope, _oaep())
        except (ValueError, IntegrityError) as e:
            # Generic error to prevent information leakage
            raise decryption_failed(self.algorithm) from e

    def _decrypt_hybrid(self, envelope: bytes) -> bytes:
        (key_len,) = _LENGTH_PREFIX.unpack_from(envelope)
        start = HYBRID_LENGTH_PREFIX_SIZE
        wrapped_key = envelope[start:start + key_len]
        sealed = envelope[start + key_len:]

        session_key = bytearray(self._private_key.decrypt(wrapped_key, _oaep()))
        with ZeroizeContext(session_key):
            return aes_gcm.open_sealed(session_key, sealed)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        bits = self._public_key.key_size if self._public_key is not None else 0
        return f"RsaEnvelopeService(bits={bits}, private={self.has_private_key})"
