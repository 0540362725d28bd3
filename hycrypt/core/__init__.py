"""
Core module - Contains configuration, logging, errors and the encryption core.
"""

from hycrypt.core.config import HycryptConfig
from hycrypt.core.errors import HycryptError
from hycrypt.core.logging import SecureLogFilter, configure_logging, get_secure_logger
from hycrypt.core.models import CryptoOptions, InputFormat, OperationResult, OutputFormat

__all__ = [
    "CryptoOptions",
    "HycryptConfig",
    "HycryptError",
    "InputFormat",
    "OperationResult",
    "OutputFormat",
    "SecureLogFilter",
    "configure_logging",
    "get_secure_logger",
]
