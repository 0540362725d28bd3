"""
Data Sinks
==========

Uniform write contract over files and display output.

Contract:
    write(data) -> accept bytes (may be called more than once)
    path        -> final output path, or "stdout" for display sinks
    close()     -> flush and release (idempotent)
    result      -> rendered display text, None for file sinks

Unique Output Names:
    FileSink never overwrites. When the requested path exists, a
    ``-<6 random [a-z0-9]>`` suffix is inserted before the last extension
    and the exclusive create is retried until a free name is found.
"""

from __future__ import annotations

import binascii
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, TextIO

from hycrypt.core.constants import DISPLAY_SINK_PATH
from hycrypt.core.errors import InvalidFormatError, from_os_error
from hycrypt.core.models import OutputFormat
from hycrypt.utils.paths import with_random_suffix

_log = logging.getLogger("hycrypt.file_ops.sink")

# Upper bound on suffix retries before giving up on a directory
_MAX_UNIQUE_ATTEMPTS = 100


class DataSink(ABC):
    """Abstract data sink, usable as a context manager."""

    __slots__ = ()

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write data, returning the number of bytes accepted."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Output path or display marker."""

    def close(self) -> None:
        """Flush and release. Safe to call more than once."""

    @property
    def result(self) -> Optional[str]:
        return None

    def __enter__(self) -> "DataSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"


def _open_unique(path: Path) -> tuple[BinaryIO, Path]:
    """Exclusively create ``path`` or a suffixed sibling of it."""
    candidate = path
    for _ in range(_MAX_UNIQUE_ATTEMPTS):
        try:
            return open(candidate, "xb"), candidate
        except FileExistsError:
            candidate = with_random_suffix(path)
        except OSError as e:
            raise from_os_error(e, candidate) from e
    raise from_os_error(FileExistsError(f"no free name for {path}"), path)


class FileSink(DataSink):
    """
    File on disk.

    Usage:
        with FileSink("out/report.pdf.hycrypt") as sink:
            sink.write(envelope)
        print(sink.path)   # may carry a random suffix
    """

    __slots__ = ("_path", "_file")

    def __init__(self, path: Path | str) -> None:
        """
        Create the output file, with parent directories.

        Raises:
            PermissionDeniedError: If the file cannot be created
        """
        requested = Path(path)
        try:
            requested.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise from_os_error(e, requested.parent) from e

        self._file, self._path = _open_unique(requested)
        if self._path != requested:
            _log.info("Output exists, writing to %s instead", self._path.name)

    def write(self, data: bytes) -> int:
        try:
            written = self._file.write(data)
            self._file.flush()
        except OSError as e:
            raise from_os_error(e, self._path) from e
        return written

    @property
    def path(self) -> str:
        return str(self._path)

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class _DisplaySink(DataSink):
    """Buffers output and renders it as text on close."""

    __slots__ = ("_buffer", "_stream", "_result")

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._buffer = bytearray()
        self._stream = stream
        self._result: Optional[str] = None

    def write(self, data: bytes) -> int:
        self._buffer.extend(data)
        return len(data)

    @property
    def path(self) -> str:
        return DISPLAY_SINK_PATH

    @property
    def result(self) -> Optional[str]:
        """Rendered text, available once the sink is closed."""
        return self._result

    def _render(self, data: bytes) -> str:
        raise NotImplementedError

    def close(self) -> None:
        if self._result is not None:
            return
        self._result = self._render(bytes(self._buffer))
        self._buffer.clear()
        if self._stream is not None:
            self._stream.write(self._result + "\n")
            self._stream.flush()


class HexSink(_DisplaySink):
    """Renders output as lowercase hex."""

    __slots__ = ()

    def _render(self, data: bytes) -> str:
        return binascii.hexlify(data).decode("ascii")


class TextSink(_DisplaySink):
    """Renders output as UTF-8 text, replacing undecodable bytes."""

    __slots__ = ()

    def _render(self, data: bytes) -> str:
        return data.decode("utf-8", errors="replace")


def create_sink(path: Path | str, output_format: OutputFormat = OutputFormat.FILE) -> DataSink:
    """
    Build the sink for an output format.

    ``path`` is only used for FILE output.
    """
    if output_format is OutputFormat.FILE:
        return FileSink(path)
    if output_format is OutputFormat.HEX:
        return HexSink()
    if output_format is OutputFormat.TEXT:
        return TextSink()
    raise InvalidFormatError(f"unsupported output type: {output_format}", format="output")
