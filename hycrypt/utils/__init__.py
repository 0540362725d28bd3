"""
Utils module - Utility functions and helpers.

This module contains utility functions used throughout hycrypt.
"""

from hycrypt.utils.paths import (
    get_app_config_dir,
    get_app_log_dir,
    get_secure_temp_dir,
    is_path_within_directory,
    with_random_suffix,
)

__all__ = [
    "get_app_config_dir",
    "get_app_log_dir",
    "get_secure_temp_dir",
    "is_path_within_directory",
    "with_random_suffix",
]
