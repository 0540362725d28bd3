"""
Algorithm Detection
===================

Infers the encryption algorithm from a structured filename.

Patterns (tried in order):
    .*-<hash6>-<date8>-(<algs>)\\.zip<ext>$    directory archive
    .*-<hash6>-<date8>-(<algs>)<ext>$          file

Detection depends only on the supported algorithm list and the extension.
"""

from __future__ import annotations

import os
import re
from typing import Iterable

from hycrypt.core.constants import DIRECTORY_ARCHIVE_SUFFIX


class AlgorithmDetector:
    """
    Regex-driven algorithm detector.

    Usage:
        detector = AlgorithmDetector(["rsa", "kmac"], ".hycrypt")
        detector.detect_from_path("/tmp/doc-abcdef-20250915-rsa.hycrypt")  # "rsa"
        detector.detect_from_path("document.txt")                          # ""
    """

    __slots__ = ("_supported", "_extension", "_patterns")

    def __init__(self, supported_algorithms: Iterable[str], file_extension: str) -> None:
        self._supported = tuple(supported_algorithms)
        self._extension = file_extension

        alternation = "|".join(re.escape(a) for a in self._supported)
        ext = re.escape(file_extension)
        zip_suffix = re.escape(DIRECTORY_ARCHIVE_SUFFIX)
        self._patterns: tuple[re.Pattern[str], ...] = ()
        if alternation:
            self._patterns = (
                re.compile(rf".*-[a-z0-9]{{6}}-[0-9]{{8}}-({alternation}){zip_suffix}{ext}$"),
                re.compile(rf".*-[a-z0-9]{{6}}-[0-9]{{8}}-({alternation}){ext}$"),
            )

    def detect_from_path(self, file_path: str | os.PathLike[str]) -> str:
        """Return the algorithm encoded in the file name, or "" if none."""
        file_name = os.path.basename(os.fspath(file_path))
        for pattern in self._patterns:
            match = pattern.match(file_name)
            if match and self.is_supported(match.group(1)):
                return match.group(1)
        return ""

    @property
    def supported_algorithms(self) -> list[str]:
        """Copy of the supported algorithm list."""
        return list(self._supported)

    def is_supported(self, algorithm: str) -> bool:
        return algorithm in self._supported
