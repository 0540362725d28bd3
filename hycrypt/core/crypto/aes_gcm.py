"""
AES-GCM Authenticated Encryption
================================

Sealed-box wrapper around AES-GCM used by both envelope services.

Blob layout:
    NONCE (12) | CIPHERTEXT | TAG (16)

Security Properties:
    - 128/192/256-bit key (selected by key length)
    - 96-bit random nonce per call (NIST recommended)
    - 128-bit authentication tag

WARNING:
    - Never reuse (key, nonce) pairs
    - Always verify tag before using plaintext
    - Keys should be wiped from memory after use
"""

from __future__ import annotations

import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from hycrypt.core.constants import AES_KEY_SIZES, AES_NONCE_SIZE, AES_TAG_SIZE
from hycrypt.core.errors import IntegrityError

KeyLike = bytes | bytearray


def _check_key(key: KeyLike) -> None:
    if len(key) not in AES_KEY_SIZES:
        raise ValueError(
            f"AES key must be one of {sorted(AES_KEY_SIZES)} bytes, got {len(key)}"
        )


def generate_nonce() -> bytes:
    """
    Generate a cryptographically secure random nonce.

    Returns:
        12 bytes of cryptographic random data
    """
    return secrets.token_bytes(AES_NONCE_SIZE)


def seal(key: KeyLike, plaintext: bytes) -> bytes:
    """
    Encrypt plaintext and return ``nonce || ciphertext || tag``.

    Args:
        key: 16, 24 or 32 byte AES key
        plaintext: Data to encrypt (can be empty)

    Raises:
        ValueError: If the key has an invalid length
    """
    _check_key(key)
    nonce = generate_nonce()
    return nonce + AESGCM(key).encrypt(nonce, plaintext, None)


def open_sealed(key: KeyLike, blob: bytes) -> bytes:
    """
    Verify and decrypt a blob produced by :func:`seal`.

    Raises:
        ValueError: If the key has an invalid length
        IntegrityError: If the blob is truncated or authentication fails

    Security Notes:
        - Integrity is verified BEFORE any plaintext is returned
        - The error never says whether the blob was short or the tag bad
    """
    _check_key(key)
    if len(blob) < AES_NONCE_SIZE + AES_TAG_SIZE:
        raise IntegrityError("sealed data too short")

    nonce = blob[:AES_NONCE_SIZE]
    try:
        return AESGCM(key).decrypt(nonce, blob[AES_NONCE_SIZE:], None)
    except InvalidTag as e:
        raise IntegrityError("authentication failed") from e
