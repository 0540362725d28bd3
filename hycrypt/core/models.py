"""
Operation Models
================

Per-operation options and results shared by the processor and its callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InputFormat(Enum):
    """How the input value of an operation is interpreted."""
    FILE = "file"
    TEXT = "text"
    HEX = "hex"


class OutputFormat(Enum):
    """Where the output of an operation goes."""
    FILE = "file"
    HEX = "hex"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class CryptoOptions:
    """
    Immutable options for one operation.

    An empty ``algorithm`` means "detect from the input name" on decrypt.
    """

    algorithm: str = ""
    input_format: InputFormat = InputFormat.FILE
    output_format: OutputFormat = OutputFormat.FILE
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a successful operation."""

    success: bool
    output_path: str
    processed_size: int
    algorithm: str
    elapsed_ms: float
    output_text: Optional[str] = None
