"""
Path Utilities
==============

OS-aware path handling utilities with security considerations.
"""

from __future__ import annotations

import os
import platform
import secrets
import string
import tempfile
from pathlib import Path

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def get_secure_temp_dir() -> Path:
    """
    Get a private temporary directory for staging artifacts.

    Creates ``<tmp>/hycrypt_temp`` with owner-only permissions.

    Returns:
        Path to secure temporary directory
    """
    temp_base = Path(tempfile.gettempdir())
    secure_temp = temp_base / "hycrypt_temp"

    # Create with restricted permissions
    secure_temp.mkdir(mode=0o700, exist_ok=True)

    # On Windows, permissions work differently
    if platform.system().lower() != "windows":
        secure_temp.chmod(0o700)

    return secure_temp


def is_path_within_directory(path: Path, directory: Path) -> bool:
    """
    Check if a path is safely within a directory (prevents path traversal).

    Args:
        path: The path to check
        directory: The containing directory

    Returns:
        True if path is safely within directory
    """
    try:
        resolved_path = path.resolve()
        resolved_dir = directory.resolve()
        return resolved_path.is_relative_to(resolved_dir)
    except (ValueError, RuntimeError):
        return False


def with_random_suffix(path: Path, length: int = 6) -> Path:
    """
    Insert ``-<random>`` before the last suffix.

    ``out/report.pdf`` -> ``out/report-x1y2z3.pdf``
    """
    token = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))
    stem, ext = os.path.splitext(path.name)
    return path.with_name(f"{stem}-{token}{ext}")


def get_app_config_dir(app_name: str = "hycrypt") -> Path:
    """
    Get the OS-appropriate application config directory.

    Args:
        app_name: Name of the application

    Returns:
        Path to application config directory
    """
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif system == "darwin":
        base = Path.home() / "Library" / "Preferences"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

    return base / app_name


def get_app_log_dir(app_name: str = "hycrypt") -> Path:
    """Get the OS-appropriate log directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / app_name / "Logs"
    elif system == "darwin":
        return Path.home() / "Library" / "Logs" / app_name
    else:
        return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / app_name / "logs"
