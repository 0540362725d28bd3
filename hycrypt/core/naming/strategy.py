"""
Encrypted File Naming
=====================

Encodes operation metadata into the output filename so it can be parsed
back later.

Format:
    <name>-<hash6>-<YYYYMMDD>-<algorithm><ext>        (files)
    <name>-<hash6>-<YYYYMMDD>-<algorithm>.zip<ext>    (directory archives)

Where:
    - name: original basename, or an 8-char random token for temporary
      text-staging files (keeps text inputs anonymous)
    - hash6: 6 random lowercase alphanumerics
    - ext: configured extension, ".hycrypt" by default

Parsing is a best-effort heuristic: a name that doesn't match is returned
unchanged with empty algorithm and date.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from hycrypt.core.constants import (
    DATE_FORMAT,
    DEFAULT_FILE_EXTENSION,
    DIRECTORY_ARCHIVE_SUFFIX,
    NAME_ALPHABET,
    NAME_HASH_LENGTH,
    NAME_TOKEN_LENGTH,
    SUPPORTED_ALGORITHMS,
    TEMP_NAME_MARKERS,
    TEXT_PLACEHOLDER_NAME,
)

_TOKEN_RE = re.compile(rf"^[a-z0-9]{{{NAME_TOKEN_LENGTH}}}$")
_DUPLICATE_SUFFIX_RE = re.compile(r"^[a-z0-9]{6}$")
_DATE_RE = re.compile(r"^\d{8}$")
_LEGACY_EXTENSION = ".encrypted"


def random_token(length: int) -> str:
    """Random lowercase alphanumeric string from the OS CSPRNG."""
    return "".join(secrets.choice(NAME_ALPHABET) for _ in range(length))


def _algorithm_alternation(algorithms: Iterable[str]) -> str:
    return "|".join(re.escape(a) for a in algorithms)


@dataclass(frozen=True, slots=True)
class ParsedName:
    """Metadata recovered from an encrypted filename."""

    original_name: str
    algorithm: str
    date: str
    is_directory: bool

    def __iter__(self):
        return iter((self.original_name, self.algorithm, self.date, self.is_directory))


class NamingStrategy:
    """
    Default file naming strategy.

    Usage:
        strategy = NamingStrategy(".hycrypt")

        name = strategy.generate("report.pdf", "rsa")
        # report.pdf-k3j9x0-20250101-rsa.hycrypt

        parsed = strategy.parse(name)
        # ParsedName("report.pdf", "rsa", "20250101", False)
    """

    __slots__ = ("_extension", "_algorithms", "_clock", "_stem_re")

    def __init__(
        self,
        extension: str = DEFAULT_FILE_EXTENSION,
        algorithms: Iterable[str] = SUPPORTED_ALGORITHMS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            extension: Encrypted file extension, including the dot
            algorithms: Algorithm identifiers recognised by parse()
            clock: Returns "now"; defaults to datetime.now
        """
        self._extension = extension
        self._algorithms = tuple(algorithms)
        self._clock = clock or datetime.now
        self._stem_re = re.compile(
            rf"^(.+)-([a-z0-9]{{{NAME_HASH_LENGTH}}})-(\d{{8}})-"
            rf"({_algorithm_alternation(self._algorithms)})$"
        )

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def algorithms(self) -> tuple[str, ...]:
        return self._algorithms

    def _stem(self, original_name: str, algorithm: str) -> str:
        date = self._clock().strftime(DATE_FORMAT)
        return f"{original_name}-{random_token(NAME_HASH_LENGTH)}-{date}-{algorithm}"

    def generate(self, original_name: str, algorithm: str) -> str:
        """Build the encrypted filename for a file."""
        if self.is_temporary_name(original_name):
            original_name = random_token(NAME_TOKEN_LENGTH)
        return self._stem(original_name, algorithm) + self._extension

    def parse(self, encrypted_name: str) -> ParsedName:
        """
        Recover (original name, algorithm, date, directory flag).

        8-character alphanumeric names were generated for text input and
        come back as "text-content.txt".
        """
        if not encrypted_name.endswith(self._extension):
            return ParsedName(encrypted_name, "", "", False)

        stem = encrypted_name[: -len(self._extension)]
        is_directory = stem.endswith(DIRECTORY_ARCHIVE_SUFFIX)
        if is_directory:
            stem = stem[: -len(DIRECTORY_ARCHIVE_SUFFIX)]

        match = self._stem_re.match(stem)
        if match is None:
            return ParsedName(stem, "", "", is_directory)

        original_name, _hash, date, algorithm = match.groups()
        if _TOKEN_RE.match(original_name):
            original_name = TEXT_PLACEHOLDER_NAME
        return ParsedName(original_name, algorithm, date, is_directory)

    def is_encrypted_file(self, file_name: str) -> bool:
        """
        Check the extension and look for an algorithm marker.

        Accepts ``-<alg>-`` anywhere in the stem, ``-<alg>`` at its end,
        and the legacy ``.<alg>.`` marker.
        """
        if not file_name.endswith(self._extension):
            return False

        stem = file_name[: -len(self._extension)]
        if stem.endswith(DIRECTORY_ARCHIVE_SUFFIX):
            stem = stem[: -len(DIRECTORY_ARCHIVE_SUFFIX)]
        marked = stem + "-"

        return any(
            f"-{alg}-" in marked or f".{alg}." in file_name
            for alg in self._algorithms
        )

    @staticmethod
    def is_temporary_name(file_name: str) -> bool:
        """True for names of transient text-staging artifacts."""
        return any(marker in file_name for marker in TEMP_NAME_MARKERS)

    def recover_original_name(self, encrypted_name: str) -> str:
        """
        Strip naming metadata from an encrypted filename.

        Handles the duplicate suffix a file sink appends on collision
        (``name-hash-date-alg-xxxxxx<ext>``) and the legacy
        ``name-date-alg.encrypted`` form.
        """
        if encrypted_name.endswith(self._extension):
            parts = encrypted_name[: -len(self._extension)].split("-")
            has_duplicate_suffix = bool(_DUPLICATE_SUFFIX_RE.match(parts[-1]))
            if has_duplicate_suffix and len(parts) >= 5:
                return "-".join(parts[:-4])
            if len(parts) >= 4:
                return "-".join(parts[:-3])

        if encrypted_name.endswith(_LEGACY_EXTENSION):
            parts = encrypted_name[: -len(_LEGACY_EXTENSION)].split("-")
            if (
                len(parts) >= 3
                and parts[-1] in self._algorithms
                and _DATE_RE.match(parts[-2])
            ):
                original = parts[:-2]
                if len(original) == 1 and _TOKEN_RE.match(original[0]):
                    return TEXT_PLACEHOLDER_NAME
                return "-".join(original)

        return encrypted_name


class DirectoryNamingStrategy(NamingStrategy):
    """Naming strategy for directory archives (``.zip<ext>`` suffix)."""

    __slots__ = ()

    def generate(self, original_name: str, algorithm: str) -> str:
        return self._stem(original_name, algorithm) + DIRECTORY_ARCHIVE_SUFFIX + self._extension
