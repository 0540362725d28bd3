"""
Naming Module - Encrypted filename generation, parsing and detection.
"""

from hycrypt.core.naming.detector import AlgorithmDetector
from hycrypt.core.naming.strategy import (
    DirectoryNamingStrategy,
    NamingStrategy,
    ParsedName,
)

__all__ = [
    "AlgorithmDetector",
    "DirectoryNamingStrategy",
    "NamingStrategy",
    "ParsedName",
]
