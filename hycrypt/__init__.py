"""
Hycrypt - Hybrid File Encryption Engine
=======================================

Encrypts files, directories and text into self-contained envelopes using
either an RSA key pair (with AES-GCM hybrid fallback) or a shared
symmetric secret, and names the output so it can be detected and
restored later.

Security Notice:
- No key material or plaintext is logged
- Decryption failures are generic
- Temporary artifacts live in an owner-only temp directory
"""

from hycrypt.core.config import HycryptConfig
from hycrypt.core.crypto import UnifiedProcessor
from hycrypt.core.logging import get_secure_logger
from hycrypt.core.models import CryptoOptions, InputFormat, OperationResult, OutputFormat

__version__ = "0.1.0"

__all__ = [
    "CryptoOptions",
    "HycryptConfig",
    "InputFormat",
    "OperationResult",
    "OutputFormat",
    "UnifiedProcessor",
    "get_secure_logger",
    "__version__",
]
