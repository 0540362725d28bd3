"""
Directory Archiving
===================

Zip helpers used to encrypt whole directories as a single payload.

Directory Finalization:
    After a directory archive is decrypted to ``<out>/<name>`` (a zip file),
    finalize_directory() commits it as a real directory:

        1. extract <out>/<name> -> <out>/<name>_extracted
        2. delete the zip <out>/<name>
        3. rename <out>/<name>_extracted -> <out>/<name>

    The steps are not atomic. A failure between them leaves the staging
    directory and/or the zip behind; callers get the error and nothing is
    rolled back.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from pathlib import Path

from hycrypt.core.errors import InvalidFormatError
from hycrypt.utils.paths import get_secure_temp_dir, is_path_within_directory

_log = logging.getLogger("hycrypt.file_ops.archive")

EXTRACTED_SUFFIX = "_extracted"


def zip_directory(source_dir: Path | str, zip_path: Path | str) -> None:
    """
    Write every regular file under ``source_dir`` into ``zip_path``.

    Entry names are relative to ``source_dir``; empty directories are skipped.
    """
    source_dir = Path(source_dir)
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for root, _dirs, files in os.walk(source_dir):
            for file_name in sorted(files):
                file_path = Path(root) / file_name
                archive.write(file_path, file_path.relative_to(source_dir).as_posix())


def create_temp_zip(source_dir: Path | str) -> Path:
    """
    Archive a directory into a new temporary zip file.

    Returns:
        Path of the temp zip. The caller owns it and must delete it.
    """
    source_dir = Path(source_dir)
    fd, temp_name = tempfile.mkstemp(
        prefix=f"crypto-zip-{source_dir.name}-",
        suffix=".zip",
        dir=get_secure_temp_dir(),
    )
    os.close(fd)
    temp_path = Path(temp_name)

    try:
        zip_directory(source_dir, temp_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return temp_path


def unzip_file(zip_path: Path | str, dest_dir: Path | str) -> None:
    """
    Extract ``zip_path`` into ``dest_dir``.

    Raises:
        InvalidFormatError: If the file is not a zip archive or an entry
            would land outside ``dest_dir``
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    try:
        archive = zipfile.ZipFile(zip_path)
    except zipfile.BadZipFile as e:
        raise InvalidFormatError("invalid zip format", e, path=str(zip_path)) from e

    with archive:
        for member in archive.infolist():
            target = dest_dir / member.filename
            if not is_path_within_directory(target, dest_dir):
                raise InvalidFormatError(
                    "zip entry escapes destination", entry=member.filename
                )
            archive.extract(member, dest_dir)


def finalize_directory(zip_path: Path | str) -> Path:
    """
    Turn a decrypted directory archive into the directory it holds.

    Args:
        zip_path: Decrypted zip file, named after the final directory

    Returns:
        Path of the final directory (same path as ``zip_path``)
    """
    zip_path = Path(zip_path)
    staging_dir = zip_path.with_name(zip_path.name + EXTRACTED_SUFFIX)

    unzip_file(zip_path, staging_dir)
    zip_path.unlink()
    staging_dir.rename(zip_path)

    _log.debug("Directory archive extracted to %s", zip_path)
    return zip_path
