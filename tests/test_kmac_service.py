"""Tests for the keyed-derivation envelope service."""

import hashlib
import secrets

import pytest

from hycrypt.core.crypto import KmacEnvelopeService
from hycrypt.core.errors import DecryptionFailedError, InvalidConfigError, InvalidFormatError


def test_envelope_size(kmac_service):
    envelope = kmac_service.encrypt(b"test")
    assert len(envelope) == 16 + 12 + 4 + 16
    assert kmac_service.decrypt(envelope) == b"test"


def test_fresh_salt_per_encryption(kmac_service):
    first = kmac_service.encrypt(b"same")
    second = kmac_service.encrypt(b"same")
    assert first[:16] != second[:16]
    assert first != second


def test_derived_key_matches_shake256(kmac_secret, kmac_service):
    salt = bytes(range(16))
    expected = hashlib.shake_256(kmac_secret + salt + b"KMAC-AES-KEY-DERIVATION").digest(32)
    assert bytes(kmac_service.derive_key(salt)) == expected


@pytest.mark.parametrize("key_size", [16, 32, 64])
@pytest.mark.parametrize("aes_key_size", [16, 24, 32])
def test_round_trip_for_key_sizes(key_size, aes_key_size):
    service = KmacEnvelopeService(
        secrets.token_bytes(key_size), key_size=key_size, aes_key_size=aes_key_size
    )
    assert service.decrypt(service.encrypt(b"payload")) == b"payload"


def test_large_payload_round_trip(kmac_service):
    plaintext = secrets.token_bytes(3 * 1024 * 1024)
    assert kmac_service.decrypt(kmac_service.encrypt(plaintext)) == plaintext


def test_secret_length_mismatch():
    with pytest.raises(InvalidConfigError):
        KmacEnvelopeService(secrets.token_bytes(16), key_size=32)


def test_short_envelope_is_invalid_format(kmac_service):
    with pytest.raises(InvalidFormatError):
        kmac_service.decrypt(bytes(15))


def test_salt_only_envelope_fails_authentication(kmac_service):
    with pytest.raises(DecryptionFailedError):
        kmac_service.decrypt(bytes(16))


@pytest.mark.parametrize("position", [0, 16, 30, -1])
def test_tampering_is_detected(kmac_service, position):
    envelope = bytearray(kmac_service.encrypt(b"sensitive"))
    envelope[position] ^= 0x80
    with pytest.raises(DecryptionFailedError):
        kmac_service.decrypt(bytes(envelope))


def test_other_secret_cannot_decrypt(kmac_service):
    other = KmacEnvelopeService(secrets.token_bytes(32))
    with pytest.raises(DecryptionFailedError):
        other.decrypt(kmac_service.encrypt(b"data"))
