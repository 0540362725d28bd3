"""
Hycrypt Constants
=================

Algorithm identifiers and envelope/naming constants shared across modules.
These values are part of the on-disk format and must not change without
a format version bump.
"""

from typing import Final

# Algorithm identifiers
ALGORITHM_RSA: Final[str] = "rsa"
ALGORITHM_KMAC: Final[str] = "kmac"
SUPPORTED_ALGORITHMS: Final[tuple[str, ...]] = (ALGORITHM_RSA, ALGORITHM_KMAC)

# Symmetric primitive (AES-GCM)
AES_NONCE_SIZE: Final[int] = 12  # 96 bits
AES_TAG_SIZE: Final[int] = 16  # 128 bits
AES_KEY_SIZES: Final[frozenset[int]] = frozenset({16, 24, 32})

# Asymmetric envelope
HYBRID_LENGTH_PREFIX_SIZE: Final[int] = 4  # u32 big-endian
HYBRID_MAX_WRAPPED_KEY_SIZE: Final[int] = 1024
RSA_KEY_SIZES: Final[frozenset[int]] = frozenset({2048, 3072, 4096})

# Keyed-derivation envelope
KMAC_SALT_SIZE: Final[int] = 16
KMAC_CONTEXT_LABEL: Final[bytes] = b"KMAC-AES-KEY-DERIVATION"
KMAC_KEY_SIZES: Final[frozenset[int]] = frozenset({16, 32, 64})

# Naming
DEFAULT_FILE_EXTENSION: Final[str] = ".hycrypt"
DIRECTORY_ARCHIVE_SUFFIX: Final[str] = ".zip"
DATE_FORMAT: Final[str] = "%Y%m%d"
NAME_HASH_LENGTH: Final[int] = 6
NAME_TOKEN_LENGTH: Final[int] = 8
NAME_ALPHABET: Final[str] = "abcdefghijklmnopqrstuvwxyz0123456789"
TEXT_PLACEHOLDER_NAME: Final[str] = "text-content.txt"
TEMP_NAME_MARKERS: Final[tuple[str, ...]] = ("crypto-text-", "hycrypt-text-", ".tmp")

# Source names for in-memory inputs
TEXT_SOURCE_NAME: Final[str] = "text-input"
HEX_SOURCE_NAME: Final[str] = "hex-input"
DISPLAY_SINK_PATH: Final[str] = "stdout"
