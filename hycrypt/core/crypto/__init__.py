"""
Hycrypt Cryptographic Core
==========================

Envelope services and the processor that routes data through them.

Architecture:
    1. AES-GCM: symmetric primitive shared by both services
    2. RSA-OAEP: direct envelope, hybrid (RSA-wrapped AES key) fallback
    3. SHAKE256 derivation: per-operation AES key from secret and salt

Security Properties:
    - All symmetric encryption is authenticated (AEAD)
    - Fresh random nonce, salt and session key per operation
    - Decryption failures are generic (no oracle detail)

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from hycrypt.core.crypto.kmac_service import KmacEnvelopeService
from hycrypt.core.crypto.processor import UnifiedProcessor
from hycrypt.core.crypto.rsa_service import RsaEnvelopeService, is_hybrid_envelope
from hycrypt.core.crypto.service import EnvelopeService

__all__ = [
    "EnvelopeService",
    "KmacEnvelopeService",
    "RsaEnvelopeService",
    "UnifiedProcessor",
    "is_hybrid_envelope",
]
