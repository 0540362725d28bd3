"""Tests for the RSA direct/hybrid envelope service."""

import secrets
import struct

import pytest

from hycrypt.core.crypto import RsaEnvelopeService, is_hybrid_envelope
from hycrypt.core.errors import (
    DecryptionFailedError,
    InvalidConfigError,
    InvalidFormatError,
    KeyNotFoundError,
)


def test_small_payload_encrypts_directly(rsa_service):
    envelope = rsa_service.encrypt(b"hello12345")
    assert len(envelope) == 256
    assert rsa_service.decrypt(envelope) == b"hello12345"


def test_one_mib_payload_uses_hybrid_envelope(rsa_service):
    plaintext = secrets.token_bytes(1024 * 1024)
    envelope = rsa_service.encrypt(plaintext)

    assert struct.unpack(">I", envelope[:4])[0] == 256
    assert len(envelope) == 4 + 256 + 12 + len(plaintext) + 16
    assert is_hybrid_envelope(envelope)
    assert rsa_service.decrypt(envelope) == plaintext


def test_hybrid_boundary(rsa_service):
    limit = rsa_service.max_direct_plaintext
    assert limit == 190

    assert len(rsa_service.encrypt(bytes(limit))) == 256
    assert len(rsa_service.encrypt(bytes(limit + 1))) == 4 + 256 + 12 + limit + 1 + 16


@pytest.mark.parametrize("aes_key_size", [16, 24, 32])
def test_hybrid_round_trip_with_each_session_key_size(rsa_private_key, aes_key_size):
    service = RsaEnvelopeService(
        rsa_private_key.public_key(), rsa_private_key, aes_key_size=aes_key_size
    )
    plaintext = secrets.token_bytes(5000)
    assert service.decrypt(service.encrypt(plaintext)) == plaintext


def test_empty_payload_round_trip(rsa_service):
    assert rsa_service.decrypt(rsa_service.encrypt(b"")) == b""


def test_tampered_hybrid_envelope_fails_generically(rsa_service):
    envelope = bytearray(rsa_service.encrypt(bytes(4096)))
    envelope[-1] ^= 0x01
    with pytest.raises(DecryptionFailedError) as exc_info:
        rsa_service.decrypt(bytes(envelope))
    assert exc_info.value.context == {"algorithm": "rsa"}
    assert exc_info.value.cause is None


def test_tampered_wrapped_key_fails(rsa_service):
    envelope = bytearray(rsa_service.encrypt(bytes(4096)))
    envelope[10] ^= 0x01
    with pytest.raises(DecryptionFailedError):
        rsa_service.decrypt(bytes(envelope))


def test_garbage_fails(rsa_service):
    with pytest.raises(DecryptionFailedError):
        rsa_service.decrypt(b"not an envelope at all")


def test_decrypt_without_private_key(rsa_private_key):
    service = RsaEnvelopeService(rsa_private_key.public_key())
    envelope = service.encrypt(b"data")
    assert not service.has_private_key
    with pytest.raises(KeyNotFoundError):
        service.decrypt(envelope)


def test_encrypt_without_public_key():
    service = RsaEnvelopeService(None)
    with pytest.raises(KeyNotFoundError):
        service.validate_keys()
    with pytest.raises(KeyNotFoundError):
        service.encrypt(b"data")


def test_invalid_aes_key_size(rsa_private_key):
    with pytest.raises(InvalidConfigError):
        RsaEnvelopeService(rsa_private_key.public_key(), aes_key_size=20)


def test_from_key_files(key_dir):
    service = RsaEnvelopeService.from_key_files(
        key_dir / "public.pem", key_dir / "private.pem"
    )
    assert service.has_private_key
    assert service.key_size == 2048
    assert service.decrypt(service.encrypt(b"from files")) == b"from files"


def test_from_key_files_tolerates_missing_private_key(key_dir, caplog):
    service = RsaEnvelopeService.from_key_files(
        key_dir / "public.pem", key_dir / "missing.pem"
    )
    assert not service.has_private_key
    assert "encrypt-only" in caplog.text


def test_from_key_files_requires_public_key(key_dir):
    with pytest.raises(KeyNotFoundError):
        RsaEnvelopeService.from_key_files(key_dir / "missing.pem")


def test_from_key_files_rejects_non_pem(key_dir):
    (key_dir / "bad.pem").write_text("not a key")
    with pytest.raises(InvalidFormatError):
        RsaEnvelopeService.from_key_files(key_dir / "bad.pem")


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", False),
        (b"\x00\x00\x01\x00", False),
        (b"\x00\x00\x00\x00" + bytes(10), False),
        (b"\x00\x00\x00\x05" + bytes(10), True),
        (b"\x00\x00\x00\x0e" + bytes(10), False),
        (b"\x00\x00\x04\x01" + bytes(2000), False),
        (b"\x00\x00\x04\x00" + bytes(2000), True),
    ],
)
def test_is_hybrid_envelope(data, expected):
    assert is_hybrid_envelope(data) is expected


def test_repr_hides_key_material(rsa_service):
    assert repr(rsa_service) == "RsaEnvelopeService(bits=2048, private=True)"


@pytest.mark.parametrize("position", [0, 100, 255])
def test_tampered_direct_envelope_fails(rsa_service, position):
    envelope = bytearray(rsa_service.encrypt(b"hello12345"))
    envelope[position] ^= 0x01
    with pytest.raises(DecryptionFailedError):
        rsa_service.decrypt(bytes(envelope))


@pytest.mark.parametrize("position", [2, 3])
def test_tampered_length_prefix_fails(rsa_service, position):
    envelope = bytearray(rsa_service.encrypt(bytes(2048)))
    envelope[position] ^= 0x01
    with pytest.raises(DecryptionFailedError):
        rsa_service.decrypt(bytes(envelope))
