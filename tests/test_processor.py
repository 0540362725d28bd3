"""End-to-end tests for the unified processor."""

import re
import secrets

import pytest

from hycrypt.core.config import EncryptionConfig, HycryptConfig, KeyConfig, PathConfig
from hycrypt.core.crypto import KmacEnvelopeService, RsaEnvelopeService, UnifiedProcessor
from hycrypt.core.errors import (
    DecryptionFailedError,
    EncryptionFailedError,
    InvalidConfigError,
    InvalidInputError,
    KeyNotFoundError,
)
from hycrypt.core.file_ops import DataSource, HexSink, TextSource
from hycrypt.core.models import CryptoOptions, InputFormat, OutputFormat
from hycrypt.utils.paths import get_secure_temp_dir


def _temp_artifacts(prefix):
    return set(get_secure_temp_dir().glob(f"{prefix}*"))


@pytest.mark.parametrize("algorithm", ["rsa", "kmac"])
@pytest.mark.parametrize("size", [0, 1, 100, 3 * 1024 * 1024])
def test_file_round_trip(tmp_path, processor, algorithm, size):
    plaintext = secrets.token_bytes(size)
    source = tmp_path / "input.bin"
    source.write_bytes(plaintext)

    encrypted = processor.process_file(
        source, tmp_path / "enc", True, CryptoOptions(algorithm=algorithm)
    )
    assert encrypted.success
    assert encrypted.algorithm == algorithm
    assert encrypted.processed_size == size
    assert encrypted.output_text is None
    assert re.match(
        rf"^input\.bin-[a-z0-9]{{6}}-\d{{8}}-{algorithm}\.hycrypt$",
        encrypted.output_path.rsplit("/", 1)[-1],
    )

    decrypted = processor.process_file(
        encrypted.output_path, tmp_path / "dec", False, CryptoOptions()
    )
    assert decrypted.algorithm == algorithm
    assert decrypted.output_path == str(tmp_path / "dec" / "input.bin")
    assert (tmp_path / "dec" / "input.bin").read_bytes() == plaintext


def test_directory_round_trip(tmp_path, processor):
    source = tmp_path / "photos"
    (source / "nested").mkdir(parents=True)
    (source / "a.jpg").write_bytes(b"jpeg")
    (source / "nested" / "b.jpg").write_bytes(bytes(5000))
    before = _temp_artifacts("crypto-zip-photos-")

    encrypted = processor.process_file(source, tmp_path / "enc", True, CryptoOptions("rsa"))
    assert encrypted.output_path.endswith("-rsa.zip.hycrypt")
    assert _temp_artifacts("crypto-zip-photos-") == before

    decrypted = processor.process_file(
        encrypted.output_path, tmp_path / "dec", False, CryptoOptions()
    )
    restored = tmp_path / "dec" / "photos"
    assert decrypted.output_path == str(restored)
    assert restored.is_dir()
    assert (restored / "a.jpg").read_bytes() == b"jpeg"
    assert (restored / "nested" / "b.jpg").read_bytes() == bytes(5000)
    assert not (tmp_path / "dec" / "photos_extracted").exists()


def test_decrypt_output_does_not_overwrite(tmp_path, processor):
    source = tmp_path / "note.txt"
    source.write_text("new")
    encrypted = processor.process_file(source, tmp_path, True, CryptoOptions("kmac"))

    source.write_text("existing")
    decrypted = processor.process_file(encrypted.output_path, tmp_path, False, CryptoOptions())

    assert source.read_text() == "existing"
    assert re.match(r"^note-[a-z0-9]{6}\.txt$", decrypted.output_path.rsplit("/", 1)[-1])


def test_undetectable_algorithm(tmp_path, processor):
    path = tmp_path / "mystery.bin"
    path.write_bytes(b"data")
    with pytest.raises(DecryptionFailedError) as exc_info:
        processor.process_file(path, tmp_path / "dec", False, CryptoOptions())
    assert exc_info.value.context["algorithm"] == "unknown"
    assert not (tmp_path / "dec").exists()


def test_failed_decrypt_removes_output(tmp_path, processor):
    path = tmp_path / "secret.txt"
    path.write_bytes(bytes(1000))
    encrypted = processor.process_file(path, tmp_path / "enc", True, CryptoOptions("kmac"))

    other = UnifiedProcessor(kmac_service=KmacEnvelopeService(secrets.token_bytes(32)))
    with pytest.raises(DecryptionFailedError):
        other.process_file(encrypted.output_path, tmp_path / "dec", False, CryptoOptions())
    assert list((tmp_path / "dec").iterdir()) == []


def test_missing_service(tmp_path, kmac_service):
    processor = UnifiedProcessor(kmac_service=kmac_service)
    path = tmp_path / "a.txt"
    path.write_text("a")
    with pytest.raises(InvalidConfigError):
        processor.process_file(path, tmp_path, True, CryptoOptions("rsa"))
    with pytest.raises(InvalidConfigError):
        processor.process_file(path, tmp_path, True, CryptoOptions("des"))


def test_validate_config():
    with pytest.raises(InvalidConfigError):
        UnifiedProcessor().validate_config()


def test_key_errors_propagate_unchanged(tmp_path, rsa_private_key):
    processor = UnifiedProcessor(RsaEnvelopeService(rsa_private_key.public_key()))
    encrypted = processor.encrypt(TextSource("x"), HexSink(), CryptoOptions("rsa"))
    assert len(encrypted.output_text) == 512

    with pytest.raises(KeyNotFoundError):
        processor.process_text(
            encrypted.output_text,
            tmp_path,
            False,
            CryptoOptions("rsa", input_format=InputFormat.HEX),
        )


class _BrokenSource(DataSource):
    source_type = "file"

    def read(self):
        raise OSError("disk on fire")

    @property
    def size(self):
        return 0

    @property
    def name(self):
        return "broken"


def test_other_errors_are_wrapped(processor):
    with pytest.raises(EncryptionFailedError) as exc_info:
        processor.encrypt(_BrokenSource(), HexSink(), CryptoOptions("kmac"))
    assert exc_info.value.context == {"algorithm": "kmac"}
    assert isinstance(exc_info.value.__cause__, OSError)

    with pytest.raises(DecryptionFailedError):
        processor.decrypt(_BrokenSource(), HexSink(), CryptoOptions("kmac"))


@pytest.mark.parametrize("algorithm", ["rsa", "kmac"])
def test_text_hex_round_trip(tmp_path, processor, algorithm):
    encrypted = processor.process_text(
        "hello, world", tmp_path, True,
        CryptoOptions(algorithm, input_format=InputFormat.TEXT, output_format=OutputFormat.HEX),
    )
    assert encrypted.output_path == "stdout"
    assert re.match(r"^[0-9a-f]+$", encrypted.output_text)
    assert list(tmp_path.iterdir()) == []

    decrypted = processor.process_text(
        encrypted.output_text.upper(), tmp_path, False,
        CryptoOptions(algorithm, input_format=InputFormat.HEX),
    )
    assert decrypted.output_text == "hello, world"


def test_text_encrypt_to_file(tmp_path, processor):
    before = _temp_artifacts("hycrypt-text-")
    encrypted = processor.process_text(
        "remember the milk", tmp_path / "enc", True,
        CryptoOptions("kmac", input_format=InputFormat.TEXT),
    )
    assert _temp_artifacts("hycrypt-text-") == before
    assert re.match(
        r"^[a-z0-9]{8}-[a-z0-9]{6}-\d{8}-kmac\.hycrypt$",
        encrypted.output_path.rsplit("/", 1)[-1],
    )

    decrypted = processor.process_file(
        encrypted.output_path, tmp_path / "dec", False, CryptoOptions()
    )
    assert decrypted.output_path.endswith("text-content.txt")
    assert (tmp_path / "dec" / "text-content.txt").read_text() == "remember the milk"


def test_text_encrypt_hex_input_is_raw_bytes(tmp_path, processor):
    encrypted = processor.process_text(
        "00 ff 10", tmp_path, True,
        CryptoOptions("kmac", input_format=InputFormat.HEX, output_format=OutputFormat.HEX),
    )
    assert encrypted.processed_size == 3


@pytest.mark.parametrize(
    "text, is_encrypt, options",
    [
        ("", True, CryptoOptions("rsa")),
        ("   \n", True, CryptoOptions("rsa")),
        ("abcd", False, CryptoOptions("rsa", input_format=InputFormat.TEXT)),
        ("abcd", False, CryptoOptions("", input_format=InputFormat.HEX)),
    ],
)
def test_text_invalid_input(tmp_path, processor, text, is_encrypt, options):
    with pytest.raises(InvalidInputError):
        processor.process_text(text, tmp_path, is_encrypt, options)


def test_from_config(tmp_path, key_dir):
    config = HycryptConfig(
        paths=PathConfig(config_dir=tmp_path, log_dir=tmp_path / "logs"),
        keys=KeyConfig(key_dir=key_dir),
        encryption=EncryptionConfig(method="kmac"),
    )
    only_kmac = UnifiedProcessor.from_config(config)
    assert repr(only_kmac).startswith("UnifiedProcessor(rsa=False, kmac=True")

    both = UnifiedProcessor.from_config(config, ["rsa", "kmac"])
    for algorithm in ("rsa", "kmac"):
        result = both.process_text(
            "x", tmp_path, True, CryptoOptions(algorithm, output_format=OutputFormat.HEX)
        )
        assert result.output_text


def test_from_config_missing_keys(tmp_path):
    config = HycryptConfig(paths=PathConfig(config_dir=tmp_path, log_dir=tmp_path))
    with pytest.raises(KeyNotFoundError):
        UnifiedProcessor.from_config(config)
    with pytest.raises(InvalidConfigError):
        UnifiedProcessor.from_config(config, ["des"])
