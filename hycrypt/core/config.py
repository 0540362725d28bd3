"""
Configuration Module
====================

Provides immutable, environment-aware configuration for the encryption core.

Features:
- Immutable configuration after initialization
- Environment variable override support (HYCRYPT_SECTION__FIELD)
- No key material in configuration, only key file locations
- OS-aware path defaults
- Relative key/output directories resolve against the config directory
"""

from __future__ import annotations

import hashlib
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional

from hycrypt.core.constants import (
    AES_KEY_SIZES,
    DEFAULT_FILE_EXTENSION,
    KMAC_KEY_SIZES,
    RSA_KEY_SIZES,
    SUPPORTED_ALGORITHMS,
)
from hycrypt.core.errors import InvalidConfigError
from hycrypt.core.naming import AlgorithmDetector, DirectoryNamingStrategy, NamingStrategy
from hycrypt.utils.paths import get_app_config_dir, get_app_log_dir


# Fields that are never taken from the environment.
# "key" is deliberately absent: key file locations are plain paths.
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "token", "credential", "salt"
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Immutable path configuration with OS-aware defaults."""

    config_dir: Path = field(default_factory=get_app_config_dir)
    log_dir: Path = field(default_factory=get_app_log_dir)

    def __post_init__(self) -> None:
        for field_name in ("config_dir", "log_dir"):
            path = getattr(self, field_name)
            if not path.is_absolute():
                raise InvalidConfigError(
                    f"{field_name} must be an absolute path", path=str(path)
                )


@dataclass(frozen=True, slots=True)
class KeyConfig:
    """Key file locations. Relative ``key_dir`` is under the config dir."""

    key_dir: Path = Path("keys")
    public_key_file: str = "public.pem"
    private_key_file: str = "private.pem"
    kmac_key_file: str = "kmac.key"


@dataclass(frozen=True, slots=True)
class DirectoryConfig:
    """Default output directories. Relative paths are under the config dir."""

    encrypted_dir: Path = Path("encrypted")
    decrypted_dir: Path = Path("decrypted")


@dataclass(frozen=True, slots=True)
class EncryptionConfig:
    """Algorithm selection and key sizes."""

    method: str = "rsa"
    supported_methods: tuple[str, ...] = SUPPORTED_ALGORITHMS
    rsa_key_size: int = 2048
    aes_key_size: int = 32
    kmac_key_size: int = 32
    file_extension: str = DEFAULT_FILE_EXTENSION

    def __post_init__(self) -> None:
        """Validate encryption settings."""
        if not self.supported_methods:
            raise InvalidConfigError("at least one encryption method must be supported")
        unknown = [m for m in self.supported_methods if m not in SUPPORTED_ALGORITHMS]
        if unknown:
            raise InvalidConfigError("unknown encryption methods", methods=unknown)
        if self.method not in self.supported_methods:
            raise InvalidConfigError("encryption method is not supported", method=self.method)
        if self.rsa_key_size not in RSA_KEY_SIZES:
            raise InvalidConfigError(
                "RSA key size must be 2048, 3072 or 4096 bits", rsa_key_size=self.rsa_key_size
            )
        if self.aes_key_size not in AES_KEY_SIZES:
            raise InvalidConfigError(
                "AES key size must be 16, 24 or 32 bytes", aes_key_size=self.aes_key_size
            )
        if self.kmac_key_size not in KMAC_KEY_SIZES:
            raise InvalidConfigError(
                "KMAC key size must be 16, 32 or 64 bytes", kmac_key_size=self.kmac_key_size
            )
        if not self.file_extension.startswith("."):
            raise InvalidConfigError(
                "file extension must start with a dot", file_extension=self.file_extension
            )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False

    def __post_init__(self) -> None:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise InvalidConfigError("invalid log level", level=self.level)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidConfigError("expected an integer", e, key=key, value=value) from e


class HycryptConfig:
    """
    Centralized, immutable configuration with environment override support.

    Usage:
        config = HycryptConfig.load()
        config.public_key_path              # <config_dir>/keys/public.pem
        config.encryption.aes_key_size      # 32
        config.detect_algorithm_from_path("a-k3j9x0-20250101-rsa.hycrypt")  # "rsa"
    """

    __slots__ = (
        "_paths", "_keys", "_directories", "_encryption", "_logging",
        "_detector", "_frozen", "_config_hash",
    )

    _instance: Optional[HycryptConfig] = None

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        keys: Optional[KeyConfig] = None,
        directories: Optional[DirectoryConfig] = None,
        encryption: Optional[EncryptionConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use HycryptConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_paths", paths or PathConfig())
        object.__setattr__(self, "_keys", keys or KeyConfig())
        object.__setattr__(self, "_directories", directories or DirectoryConfig())
        object.__setattr__(self, "_encryption", encryption or EncryptionConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(
            self,
            "_detector",
            AlgorithmDetector(self._encryption.supported_methods, self._encryption.file_extension),
        )
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a hash of the configuration for change detection."""
        config_str = (
            f"{self._paths}|{self._keys}|{self._directories}|"
            f"{self._encryption}|{self._logging}"
        )
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def keys(self) -> KeyConfig:
        return self._keys

    @property
    def directories(self) -> DirectoryConfig:
        return self._directories

    @property
    def encryption(self) -> EncryptionConfig:
        return self._encryption

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        return self._config_hash

    # Resolved paths

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self._paths.config_dir / path

    @property
    def key_dir(self) -> Path:
        return self._resolve(self._keys.key_dir)

    @property
    def public_key_path(self) -> Path:
        return self.key_dir / self._keys.public_key_file

    @property
    def private_key_path(self) -> Path:
        return self.key_dir / self._keys.private_key_file

    @property
    def kmac_key_path(self) -> Path:
        return self.key_dir / self._keys.kmac_key_file

    @property
    def encrypted_dir_path(self) -> Path:
        return self._resolve(self._directories.encrypted_dir)

    @property
    def decrypted_dir_path(self) -> Path:
        return self._resolve(self._directories.decrypted_dir)

    # Algorithm detection

    @property
    def detector(self) -> AlgorithmDetector:
        return self._detector

    def detect_algorithm_from_path(self, file_path: str | os.PathLike[str]) -> str:
        """Return the algorithm encoded in a file name, or ""."""
        return self._detector.detect_from_path(file_path)

    def is_algorithm_supported(self, algorithm: str) -> bool:
        return self._detector.is_supported(algorithm)

    @property
    def supported_algorithms(self) -> list[str]:
        return self._detector.supported_algorithms

    def naming_strategy(self, directory: bool = False) -> NamingStrategy:
        """Naming strategy bound to the configured extension and algorithms."""
        strategy_cls = DirectoryNamingStrategy if directory else NamingStrategy
        return strategy_cls(self._encryption.file_extension, self._encryption.supported_methods)

    @classmethod
    def load(cls, env_prefix: str = "HYCRYPT") -> HycryptConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables are prefixed with HYCRYPT_ and use double
        underscores between section and field.

        Examples:
            HYCRYPT_ENCRYPTION__METHOD=kmac
            HYCRYPT_ENCRYPTION__AES_KEY_SIZE=16
            HYCRYPT_KEYS__KEY_DIR=/etc/hycrypt/keys
            HYCRYPT_PATHS__CONFIG_DIR=/custom/path
            HYCRYPT_LOGGING__LEVEL=DEBUG

        Raises:
            InvalidConfigError: If an override has an invalid value
        """
        env = cls._parse_env_overrides(env_prefix)

        paths_kwargs: dict[str, Any] = {}
        for name in ("config_dir", "log_dir"):
            if f"paths.{name}" in env:
                paths_kwargs[name] = Path(env[f"paths.{name}"])

        keys_kwargs: dict[str, Any] = {}
        if "keys.key_dir" in env:
            keys_kwargs["key_dir"] = Path(env["keys.key_dir"])
        for name in ("public_key_file", "private_key_file", "kmac_key_file"):
            if f"keys.{name}" in env:
                keys_kwargs[name] = env[f"keys.{name}"]

        directories_kwargs: dict[str, Any] = {}
        for name in ("encrypted_dir", "decrypted_dir"):
            if f"directories.{name}" in env:
                directories_kwargs[name] = Path(env[f"directories.{name}"])

        encryption_kwargs: dict[str, Any] = {}
        if "encryption.method" in env:
            encryption_kwargs["method"] = env["encryption.method"].strip().lower()
        if "encryption.supported_methods" in env:
            encryption_kwargs["supported_methods"] = tuple(
                m.strip().lower() for m in env["encryption.supported_methods"].split(",") if m.strip()
            )
        for name in ("rsa_key_size", "aes_key_size", "kmac_key_size"):
            key = f"encryption.{name}"
            if key in env:
                encryption_kwargs[name] = _parse_int(key, env[key])
        if "encryption.file_extension" in env:
            encryption_kwargs["file_extension"] = env["encryption.file_extension"]

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env:
            logging_kwargs["level"] = env["logging.level"]
        for name in ("enable_console", "enable_file", "enable_json"):
            if f"logging.{name}" in env:
                logging_kwargs[name] = _parse_bool(env[f"logging.{name}"])

        return cls(
            paths=PathConfig(**paths_kwargs) if paths_kwargs else None,
            keys=KeyConfig(**keys_kwargs) if keys_kwargs else None,
            directories=DirectoryConfig(**directories_kwargs) if directories_kwargs else None,
            encryption=EncryptionConfig(**encryption_kwargs) if encryption_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # HYCRYPT_SECTION__FIELD -> section.field
                config_key = key[len(prefix_upper):].lower().replace("__", ".")
                if _is_sensitive_key(config_key):
                    continue
                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> HycryptConfig:
        """Get or create the process-wide configuration."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the process-wide configuration. Use only for testing."""
        cls._instance = None

    def ensure_directories(self) -> None:
        """Create the config, key and output directories."""
        directories = [
            self._paths.config_dir,
            self.key_dir,
            self.encrypted_dir_path,
            self.decrypted_dir_path,
        ]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

        # Keys stay owner-only on Unix-like systems
        if platform.system().lower() != "windows":
            self.key_dir.chmod(0o700)

    def __repr__(self) -> str:
        return (
            f"HycryptConfig(hash={self._config_hash}, "
            f"method={self._encryption.method}, config_dir={self._paths.config_dir})"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if getattr(self, "_frozen", False):
            raise AttributeError("HycryptConfig is immutable after initialization")
        super().__setattr__(name, value)
