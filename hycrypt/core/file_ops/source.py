"""
Data Sources
============

Uniform read contract over files, directories, text and hex input.

Contract:
    read()    -> binary stream, consumed once, caller closes it
    size      -> payload size in bytes
    name      -> path or logical name ("text-input", "hex-input")
    type      -> "file" | "directory" | "text" | "hex"
    cleanup() -> release temporary artifacts (idempotent)

Directory sources archive the directory into a temp zip at construction.
The stream returned by read() deletes that zip when closed, so a single
pass over the stream is the whole lifetime of the temp file.
"""

from __future__ import annotations

import binascii
import io
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from hycrypt.core.constants import HEX_SOURCE_NAME, TEXT_SOURCE_NAME
from hycrypt.core.errors import (
    InvalidFormatError,
    file_not_found,
    from_os_error,
    invalid_format,
)
from hycrypt.core.file_ops.archive import create_temp_zip
from hycrypt.core.models import InputFormat

# Whitespace and common separators accepted in pasted hex
_HEX_NOISE_RE = re.compile(r"[\s=:\-]")


class DataSource(ABC):
    """Abstract data source."""

    __slots__ = ()

    source_type: str = ""

    @abstractmethod
    def read(self) -> BinaryIO:
        """Open the payload as a binary stream."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Payload size in bytes."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Path or logical name of the source."""

    @property
    def type(self) -> str:
        return self.source_type

    def cleanup(self) -> None:
        """Release temporary artifacts. No-op for most sources."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, size={self.size})"


class FileSource(DataSource):
    """Regular file on disk."""

    __slots__ = ("_path", "_size")

    source_type = "file"

    def __init__(self, path: Path | str) -> None:
        """
        Raises:
            PathNotFoundError: If the file does not exist
        """
        self._path = Path(path)
        try:
            self._size = self._path.stat().st_size
        except OSError as e:
            raise file_not_found(path) from e

    def read(self) -> BinaryIO:
        try:
            return open(self._path, "rb")
        except OSError as e:
            raise from_os_error(e, self._path) from e

    @property
    def size(self) -> int:
        return self._size

    @property
    def name(self) -> str:
        return str(self._path)


class _CleanupStream(io.BufferedReader):
    """File stream that deletes its backing file when closed."""

    def __init__(self, path: Path) -> None:
        super().__init__(io.FileIO(path, "rb"))
        self._cleanup_path = path

    def close(self) -> None:
        try:
            super().close()
        finally:
            self._cleanup_path.unlink(missing_ok=True)


class DirectorySource(DataSource):
    """
    Directory on disk, transparently archived to a temp zip.

    Usage:
        source = DirectorySource("photos")
        try:
            with source.read() as stream:   # temp zip deleted on close
                data = stream.read()
        finally:
            source.cleanup()                # covers the never-read path
    """

    __slots__ = ("_dir_path", "_zip_path", "_size")

    source_type = "directory"

    def __init__(self, dir_path: Path | str) -> None:
        """
        Raises:
            PathNotFoundError: If the directory does not exist
            InvalidFormatError: If the path is not a directory
        """
        self._dir_path = Path(dir_path)
        if not self._dir_path.exists():
            raise file_not_found(dir_path)
        if not self._dir_path.is_dir():
            raise InvalidFormatError(
                f"path is not a directory: {dir_path}", format="path", path=str(dir_path)
            )

        self._zip_path = create_temp_zip(self._dir_path)
        try:
            self._size = self._zip_path.stat().st_size
        except OSError:
            self._zip_path.unlink(missing_ok=True)
            raise

    def read(self) -> BinaryIO:
        try:
            return _CleanupStream(self._zip_path)
        except OSError as e:
            raise file_not_found(self._zip_path) from e

    @property
    def size(self) -> int:
        return self._size

    @property
    def name(self) -> str:
        return str(self._dir_path)

    @property
    def archive_path(self) -> Path:
        return self._zip_path

    def cleanup(self) -> None:
        self._zip_path.unlink(missing_ok=True)


class TextSource(DataSource):
    """In-memory byte buffer."""

    __slots__ = ("_data", "_name")

    source_type = "text"

    def __init__(self, data: bytes | str, name: str = TEXT_SOURCE_NAME) -> None:
        self._data = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self._name = name

    def read(self) -> BinaryIO:
        return io.BytesIO(self._data)

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def name(self) -> str:
        return self._name


def clean_hex_input(text: str) -> str:
    """Strip whitespace and separators, lower-case the rest."""
    return _HEX_NOISE_RE.sub("", text).lower()


class HexSource(TextSource):
    """
    Hex-encoded text decoded to bytes at construction.

    Accepts pasted forms such as ``"DE AD be:ef"``.
    """

    __slots__ = ()

    source_type = "hex"

    def __init__(self, hex_data: str, name: str = HEX_SOURCE_NAME) -> None:
        """
        Raises:
            InvalidFormatError: On odd length or non-hex characters
        """
        cleaned = clean_hex_input(hex_data)
        if len(cleaned) % 2 != 0:
            raise InvalidFormatError("invalid hex format: odd length hex string", format="hex")
        try:
            data = binascii.unhexlify(cleaned)
        except (binascii.Error, ValueError) as e:
            raise invalid_format("hex", e) from e
        super().__init__(data, name)


def create_source(value: str | Path, input_format: InputFormat = InputFormat.FILE) -> DataSource:
    """
    Build the source for an input value.

    FILE input picks a FileSource or DirectorySource by what is on disk.
    TEXT and HEX input treat ``value`` as the content itself.

    Raises:
        PathNotFoundError: If a FILE input does not exist
        InvalidFormatError: For bad hex input or an unknown format
    """
    if input_format is InputFormat.FILE:
        path = Path(value)
        if not path.exists():
            raise file_not_found(path)
        if path.is_dir():
            return DirectorySource(path)
        return FileSource(path)
    if input_format is InputFormat.TEXT:
        return TextSource(str(value))
    if input_format is InputFormat.HEX:
        return HexSource(str(value))
    raise InvalidFormatError(f"unsupported input type: {input_format}", format="input")
