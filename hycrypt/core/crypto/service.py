"""
Envelope Service Interface
==========================

Common contract of the envelope services the processor dispatches to.
The set of implementations is closed: one per algorithm identifier.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class EnvelopeService(ABC):
    """
    Turns plaintext into a self-contained envelope and back.

    Implementations hold read-only key material for their lifetime and
    allocate any session/derived key per call.
    """

    __slots__ = ()

    #: Algorithm identifier embedded in filenames ("rsa", "kmac", ...)
    algorithm: str = ""

    @abstractmethod
    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext into an envelope."""

    @abstractmethod
    def decrypt(self, envelope: bytes) -> bytes:
        """Recover plaintext from an envelope."""

    @abstractmethod
    def validate_keys(self) -> None:
        """Raise KeyNotFoundError if the service cannot operate."""
