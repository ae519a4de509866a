"""
File system utilities for nativedep.

This module provides:
- Idempotent directory creation
- Replace-style file copies (remove the old file, then copy)
- Archive extraction for the two archive kinds published for the library:
  gzip-compressed tar and zip (filtered by entry name prefix)

Every OS-level failure is translated into FilesystemError, and every
unreadable archive into ArchiveCorrupt.
"""

import gzip
import logging
import shutil
import sys
import tarfile
import zipfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from nativedep.core.exceptions import (
    ArchiveCorrupt,
    FilesystemError,
    InsecureArchiveError,
)
from nativedep.core.platform import PlatformDescriptor

logger = logging.getLogger(__name__)


# ============================================================================
# Directory and File Operations
# ============================================================================


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Create a directory (and its parents) if it does not exist.

    Creating an already-existing directory is not an error.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    path = Path(path)
    if path.is_dir():
        logger.debug(f"Directory {path} already exists")
        return path
    logger.debug(f"Creating directory {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory {path}: {e}") from e
    return path


def copy_file(source: Path, destination: Path) -> Path:
    """
    Copy a single file, following symlinks.

    Raises:
        FilesystemError: If the copy fails
    """
    logger.info(f"Copying {source} to {destination}...")
    try:
        shutil.copyfile(source, destination)
        shutil.copymode(source, destination)
    except OSError as e:
        raise FilesystemError(f"Failed to copy {source} to {destination}: {e}") from e
    return destination


def replace_file(source: Path, destination: Path) -> Path:
    """
    Copy a file over an existing one: remove the old file first, then copy.

    Raises:
        FilesystemError: If removal or copy fails
    """
    if destination.exists() or destination.is_symlink():
        logger.info(f"{destination} already exists. Removing")
        try:
            destination.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to remove {destination}: {e}") from e
    return copy_file(source, destination)


def touch_file(path: Path) -> Path:
    """Create an empty file, raising FilesystemError on failure."""
    try:
        path.touch()
    except OSError as e:
        raise FilesystemError(f"Failed to create {path}: {e}") from e
    return path


def list_files(directory: Path) -> List[Path]:
    """
    List regular files directly under a directory, sorted by name.

    Raises:
        FilesystemError: If the directory cannot be read
    """
    try:
        return sorted(p for p in directory.iterdir() if p.is_file())
    except OSError as e:
        raise FilesystemError(f"Failed to list {directory}: {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()
    if not member_path.is_relative_to(destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


class ArchiveExtractor(ABC):
    """Unpacks an archive file into a directory."""

    def extract(self, archive_path: Path, destination: Path) -> None:
        """
        Extract an archive to a destination directory.

        Args:
            archive_path: Path to the archive file
            destination: Directory to extract to (created if missing)

        Raises:
            ArchiveCorrupt: If the archive is missing or cannot be read
            InsecureArchiveError: If the archive contains malicious paths
            FilesystemError: If the destination cannot be created
        """
        archive_path = Path(archive_path)
        destination = Path(destination)

        if not archive_path.exists():
            raise ArchiveCorrupt(f"Archive not found: {archive_path}")

        ensure_directory(destination)
        logger.info(f"Extracting {archive_path} to {destination}")

        try:
            self._extract(archive_path, destination)
        except ArchiveCorrupt:
            raise
        except (
            tarfile.TarError,
            zipfile.BadZipFile,
            gzip.BadGzipFile,
            zlib.error,
            EOFError,
        ) as e:
            raise ArchiveCorrupt(f"Failed to extract {archive_path}: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Failed to extract {archive_path}: {e}") from e

    @abstractmethod
    def _extract(self, archive_path: Path, destination: Path) -> None:
        pass


class TarGzExtractor(ArchiveExtractor):
    """Extracts a whole .tar.gz archive."""

    def _extract(self, archive_path: Path, destination: Path) -> None:
        with tarfile.open(archive_path, "r:gz") as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)

            # Extract with filter for security (Python 3.12+)
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)


class ZipExtractor(ArchiveExtractor):
    """
    Extracts the entries of a .zip archive whose name starts with a prefix.

    Other entries are skipped so that unrelated files are not scattered
    over the destination directory.
    """

    def __init__(self, member_prefix: str = "lib"):
        self.member_prefix = member_prefix

    def _extract(self, archive_path: Path, destination: Path) -> None:
        with zipfile.ZipFile(archive_path, "r") as zf:
            for info in zf.infolist():
                if not info.filename.startswith(self.member_prefix):
                    logger.debug(f"Skipping archive entry {info.filename}")
                    continue

                _validate_archive_path(info.filename, destination)
                output_path = destination / info.filename

                if info.is_dir():
                    output_path.mkdir(parents=True, exist_ok=True)
                    continue

                output_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(output_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)


def extractor_for(
    platform: PlatformDescriptor, member_prefix: str = "lib"
) -> ArchiveExtractor:
    """Select the extractor matching the archive kind published for a platform."""
    if platform.is_msvc:
        return ZipExtractor(member_prefix)
    return TarGzExtractor()


__all__ = [
    "ensure_directory",
    "copy_file",
    "replace_file",
    "touch_file",
    "list_files",
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "extractor_for",
]
