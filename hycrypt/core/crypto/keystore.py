"""
Key Store Loading
=================

Loads already-generated key material from disk.

Formats:
    - RSA public key: PEM SubjectPublicKeyInfo
    - RSA private key: PEM PKCS#1 ("RSA PRIVATE KEY") or PKCS#8, unencrypted
    - Symmetric secret: hex text file, surrounding whitespace ignored

Key generation is not done here.
"""

from __future__ import annotations

import binascii
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    load_pem_private_key,
    load_pem_public_key,
)

from hycrypt.core.errors import (
    InvalidFormatError,
    invalid_format,
    key_not_found,
)


def _read_key_file(path: Path | str, key_type: str) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise key_not_found(key_type, str(path)) from e


def load_public_key(path: Path | str) -> rsa.RSAPublicKey:
    """
    Load an RSA public key from a PEM file.

    Raises:
        KeyNotFoundError: If the file cannot be read
        InvalidFormatError: If the file is not an RSA public key in PEM form
    """
    data = _read_key_file(path, "public")
    try:
        key = load_pem_public_key(data)
    except ValueError as e:
        raise invalid_format("public key", e).with_context("path", str(path)) from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidFormatError("not an RSA public key", path=str(path))
    return key


def load_private_key(path: Path | str) -> rsa.RSAPrivateKey:
    """
    Load an unencrypted RSA private key from a PEM file.

    Raises:
        KeyNotFoundError: If the file cannot be read
        InvalidFormatError: If the file is not an RSA private key in PEM form
    """
    data = _read_key_file(path, "private")
    try:
        key = load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        raise invalid_format("private key", e).with_context("path", str(path)) from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidFormatError("not an RSA private key", path=str(path))
    return key


def load_symmetric_key(path: Path | str, expected_size: int) -> bytes:
    """
    Load a hex-encoded symmetric secret.

    Args:
        path: Key file path
        expected_size: Required secret length in bytes

    Raises:
        KeyNotFoundError: If the file cannot be read
        InvalidFormatError: If the content is not hex or has the wrong length
    """
    data = _read_key_file(path, "kmac")
    try:
        key = binascii.unhexlify(data.decode("ascii").strip())
    except (UnicodeDecodeError, binascii.Error, ValueError) as e:
        raise invalid_format("kmac key", e).with_context("path", str(path)) from e

    if len(key) != expected_size:
        raise InvalidFormatError(
            f"kmac key length mismatch: expected {expected_size} bytes, got {len(key)}",
            path=str(path),
        )
    return key
