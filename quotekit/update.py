"""Package a finished quotes database as a numbered update.

The destination directory holds a version file with a single line::

    quotes-sqlite3-2-14

read as ``<db name>-<db extension>-<version>-<update>``. Making an update
copies ``<db dir>/<db name>.<db extension>`` into the destination,
increments the update number in the version file and reports the md5 of
the copy, which the app uses to verify its download.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from quotekit.common.exceptions import DataFormatError, InputFileError
from quotekit.common.files import compute_md5, is_file, is_path, safe_copy

logger = logging.getLogger(__name__)

DEFAULT_VERSION_FILE = "version.txt"


@dataclass(frozen=True)
class VersionInfo:
    """Parsed contents of a version file."""

    db_name: str
    db_ext: str
    version: str
    update: int

    @classmethod
    def parse(cls, line: str) -> VersionInfo:
        """Parse a ``name-ext-version-update`` line.

        Raises:
            DataFormatError: If the line doesn't have four parts or the
                update isn't a number.
        """
        parts = [part.strip() for part in line.strip().split("-")]
        if len(parts) != 4 or not parts[3].isdigit():
            raise DataFormatError(
                line.strip(), expected_fields=4, actual_fields=len(parts)
            )
        return cls(parts[0], parts[1], parts[2], int(parts[3]))

    @property
    def db_file_name(self) -> str:
        return f"{self.db_name}.{self.db_ext}"

    def bumped(self) -> VersionInfo:
        return VersionInfo(
            self.db_name, self.db_ext, self.version, self.update + 1
        )

    def to_line(self) -> str:
        return f"{self.db_name}-{self.db_ext}-{self.version}-{self.update}"


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of making an update."""

    db_file: Path
    version: VersionInfo
    md5: str


def make_update(
    db_dir: str | Path,
    dest_dir: str | Path | None = None,
    version_file: str = DEFAULT_VERSION_FILE,
) -> UpdateResult:
    """Copy the database into *dest_dir* and bump the version file.

    Args:
        db_dir: Directory holding the database file.
        dest_dir: Release directory; defaults to the current directory.
        version_file: Version file name inside *dest_dir*.

    Returns:
        UpdateResult with the copied file, the new version and its md5.

    Raises:
        InputFileError: If a directory, the version file or the database
            file is missing, or if *db_dir* and *dest_dir* are the same
            directory.
        DataFormatError: If the version file is malformed.
    """
    source_dir = is_path(db_dir)
    target_dir = is_path(dest_dir) if dest_dir else Path.cwd()
    logger.debug(f"Destination directory: {target_dir}")
    if source_dir.resolve() == target_dir.resolve():
        raise InputFileError(
            f"Database directory '{source_dir}' is also the destination; "
            "the update must be copied somewhere else."
        )

    version_path = is_file(target_dir / version_file)
    current = VersionInfo.parse(version_path.read_text(encoding="utf-8"))

    db_file = is_file(source_dir / current.db_file_name)
    copied = safe_copy(db_file, target_dir)

    new_version = current.bumped()
    logger.debug(
        f"DB Name={new_version.db_name}, DB Ext={new_version.db_ext}, "
        f"DB Version={new_version.version}, New Update={new_version.update}"
    )
    version_path.write_text(new_version.to_line() + "\n", encoding="utf-8")

    return UpdateResult(
        db_file=copied, version=new_version, md5=compute_md5(copied)
    )
