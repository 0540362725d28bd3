"""Shared fixtures: keys, key files, services and a processor."""

from __future__ import annotations

import secrets
from datetime import datetime
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from hycrypt.core.crypto import KmacEnvelopeService, RsaEnvelopeService, UnifiedProcessor
from hycrypt.core.naming import NamingStrategy

FIXED_DATE = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """2048-bit key, generated once per session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def kmac_secret() -> bytes:
    return secrets.token_bytes(32)


@pytest.fixture
def key_dir(tmp_path: Path, rsa_private_key, kmac_secret) -> Path:
    """Directory holding public.pem, private.pem and kmac.key."""
    directory = tmp_path / "keys"
    directory.mkdir()
    (directory / "private.pem").write_bytes(
        rsa_private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    (directory / "public.pem").write_bytes(
        rsa_private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    (directory / "kmac.key").write_text(kmac_secret.hex() + "\n")
    return directory


@pytest.fixture
def rsa_service(rsa_private_key) -> RsaEnvelopeService:
    return RsaEnvelopeService(rsa_private_key.public_key(), rsa_private_key)


@pytest.fixture
def kmac_service(kmac_secret) -> KmacEnvelopeService:
    return KmacEnvelopeService(kmac_secret, key_size=32)


@pytest.fixture
def fixed_naming() -> NamingStrategy:
    return NamingStrategy(clock=lambda: FIXED_DATE)


@pytest.fixture
def processor(rsa_service, kmac_service) -> UnifiedProcessor:
    return UnifiedProcessor(rsa_service, kmac_service)
