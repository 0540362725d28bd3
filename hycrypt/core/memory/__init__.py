"""
Hycrypt Memory Security Module
==============================

Provides explicit wiping of ephemeral key buffers.

WARNING:
- Python's memory model doesn't guarantee secure erasure
- These are best-effort mitigations
"""

from hycrypt.core.memory.zeroization import secure_zero, ZeroizeContext

__all__ = [
    "secure_zero",
    "ZeroizeContext",
]
