"""Tests for the error taxonomy."""

import errno

import pytest

from hycrypt.core.errors import (
    DecryptionFailedError,
    ErrorCode,
    HycryptError,
    InvalidFormatError,
    InvalidInputError,
    KeyNotFoundError,
    PathNotFoundError,
    PermissionDeniedError,
    decryption_failed,
    encryption_failed,
    file_not_found,
    from_os_error,
    invalid_format,
    key_not_found,
)


def test_str_includes_code_cause_and_context():
    err = encryption_failed("rsa", ValueError("too big"))
    assert err.code is ErrorCode.ENCRYPTION_FAILED
    assert str(err) == "[ENCRYPTION_FAILED] encryption with rsa failed caused by: too big context: {algorithm=rsa}"


def test_with_context_chains():
    err = key_not_found("private").with_context("hint", "run keygen")
    assert isinstance(err, KeyNotFoundError)
    assert err.context == {"key_type": "private", "path": None, "hint": "run keygen"}


def test_decryption_failed_without_cause():
    err = decryption_failed("kmac")
    assert isinstance(err, DecryptionFailedError)
    assert str(err) == "[DECRYPTION_FAILED] decryption with kmac failed context: {algorithm=kmac}"


def test_value_error_compatibility():
    assert isinstance(invalid_format("hex"), ValueError)
    assert isinstance(InvalidInputError("bad"), ValueError)
    assert not isinstance(file_not_found("/x"), ValueError)


@pytest.mark.parametrize(
    "os_error, expected",
    [
        (FileNotFoundError(errno.ENOENT, "missing"), PathNotFoundError),
        (PermissionError(errno.EACCES, "denied"), PermissionDeniedError),
        (IsADirectoryError(errno.EISDIR, "is a directory"), InvalidInputError),
    ],
)
def test_from_os_error(os_error, expected):
    err = from_os_error(os_error, "/some/path")
    assert type(err) is expected
    assert isinstance(err, HycryptError)
    assert err.context["path"] == "/some/path"


def test_invalid_format_context():
    err = InvalidFormatError("bad zip", path="x.zip")
    assert err.code is ErrorCode.INVALID_FORMAT
    assert err.context == {"path": "x.zip"}
