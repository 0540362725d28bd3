"""
Error Taxonomy
==============

Typed errors raised by every hycrypt component.

Each error carries:
- A stable error code
- A human-readable message
- An optional wrapped cause (also set as ``__cause__`` when raised ``from``)
- Free-form key/value context (algorithm, path, key type, ...)

Security Notes:
- Decryption failures never say WHICH stage failed (no padding/format oracle)
- Context values must never contain key material or plaintext
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Stable error codes."""
    INVALID_CONFIG = "INVALID_CONFIG"
    KEY_NOT_FOUND = "KEY_NOT_FOUND"
    ENCRYPTION_FAILED = "ENCRYPTION_FAILED"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    INVALID_FORMAT = "INVALID_FORMAT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_INPUT = "INVALID_INPUT"


class HycryptError(Exception):
    """
    Base class of all hycrypt errors.

    Usage:
        raise DecryptionFailedError("decryption with rsa failed", algorithm="rsa")

        err = KeyNotFoundError("private key not found")
        err.with_context("path", "/keys/private.pem")
    """

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context)

    def with_context(self, key: str, value: Any) -> "HycryptError":
        """Attach a context value and return self for chaining."""
        self.context[key] = value
        return self

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.cause is not None:
            parts.append(f"caused by: {self.cause}")
        if self.context:
            rendered = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"context: {{{rendered}}}")
        return " ".join(parts)


class InvalidConfigError(HycryptError, ValueError):
    """Configuration is invalid or a required service is unavailable."""
    code = ErrorCode.INVALID_CONFIG


class KeyNotFoundError(HycryptError):
    """Required key material is missing."""
    code = ErrorCode.KEY_NOT_FOUND


class EncryptionFailedError(HycryptError):
    """Encryption could not be completed."""
    code = ErrorCode.ENCRYPTION_FAILED


class DecryptionFailedError(HycryptError):
    """
    Decryption could not be completed.

    This is a generic error that doesn't reveal the cause
    (to prevent information leakage).
    """
    code = ErrorCode.DECRYPTION_FAILED


class PathNotFoundError(HycryptError):
    """An input file or directory does not exist."""
    code = ErrorCode.FILE_NOT_FOUND


class InvalidFormatError(HycryptError, ValueError):
    """Input data does not have the expected format."""
    code = ErrorCode.INVALID_FORMAT


class PermissionDeniedError(HycryptError):
    """The filesystem refused access."""
    code = ErrorCode.PERMISSION_DENIED


class InvalidInputError(HycryptError, ValueError):
    """Caller supplied an unusable combination of inputs."""
    code = ErrorCode.INVALID_INPUT


class IntegrityError(Exception):
    """
    Raised by the symmetric primitive when authentication fails.

    Services translate it into DecryptionFailedError.
    """
    pass


# Convenience constructors


def key_not_found(key_type: str, path: Any = None) -> KeyNotFoundError:
    return KeyNotFoundError(f"{key_type} key not found", key_type=key_type, path=path)


def encryption_failed(algorithm: str, cause: Optional[BaseException] = None) -> EncryptionFailedError:
    return EncryptionFailedError(f"encryption with {algorithm} failed", cause, algorithm=algorithm)


def decryption_failed(algorithm: str, cause: Optional[BaseException] = None) -> DecryptionFailedError:
    return DecryptionFailedError(f"decryption with {algorithm} failed", cause, algorithm=algorithm)


def file_not_found(path: Any) -> PathNotFoundError:
    return PathNotFoundError("file not found", path=str(path))


def invalid_format(fmt: str, cause: Optional[BaseException] = None) -> InvalidFormatError:
    return InvalidFormatError(f"invalid {fmt} format", cause, format=fmt)


def from_os_error(err: OSError, path: Any) -> HycryptError:
    """Map an OSError onto the taxonomy."""
    if isinstance(err, FileNotFoundError):
        return file_not_found(path)
    if isinstance(err, PermissionError):
        return PermissionDeniedError("permission denied", err, path=str(path))
    return InvalidInputError(f"I/O error: {err.strerror or err}", err, path=str(path))
