"""File and directory helpers."""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

from quotekit.common.exceptions import InputFileError

_MD5_CHUNK_SIZE = 64 * 1024


def is_file(path: str | Path) -> Path:
    """Validate that *path* names an existing regular file.

    Surrounding whitespace is stripped first, so values read from version
    or config files can be passed as-is.

    Args:
        path: File path to check.

    Returns:
        The stripped path.

    Raises:
        InputFileError: If the file doesn't exist or isn't a regular file.
    """
    resolved = Path(str(path).strip())
    if not resolved.is_file():
        raise InputFileError(
            f"The specified file '{resolved}' does not exist or is not readable."
        )
    return resolved


def is_path(path: str | Path) -> Path:
    """Validate that *path* names an existing directory.

    Raises:
        InputFileError: If the directory doesn't exist.
    """
    resolved = Path(str(path).strip())
    if not resolved.is_dir():
        raise InputFileError(
            f"The specified directory '{resolved}' does not exist."
        )
    return resolved


def compute_md5(path: str | Path) -> str:
    """Compute the hex md5 checksum of a file.

    Args:
        path: File to checksum.

    Returns:
        The 32 character lowercase hex digest.
    """
    digest = hashlib.md5()
    with open(is_file(path), "rb") as handle:
        for chunk in iter(lambda: handle.read(_MD5_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def safe_copy(source: str | Path, target: str | Path) -> Path:
    """Copy a file, failing if the source is modified during the copy.

    The source modification time (whole seconds) is compared before and
    after copying.

    Args:
        source: File to copy.
        target: Destination file or directory.

    Returns:
        Path of the written copy.

    Raises:
        InputFileError: If the source is missing or changed mid-copy.
    """
    source_path = is_file(source)

    pre_mtime = int(source_path.stat().st_mtime)
    copied = Path(shutil.copy(source_path, target))
    post_mtime = int(source_path.stat().st_mtime)

    if pre_mtime != post_mtime:
        raise InputFileError(
            f"Source file '{source_path}' last modification time stamp "
            "has changed during the copy"
        )
    return copied
