"""
Prebuilt binary installation.

This module orchestrates the prebuilt path:
1. Locate the newest archive for the platform
2. Download it into the cache directory (skipped if already cached)
3. Extract it (skipped if the expected libraries are already unpacked)
4. Copy the unpacked libraries into the output directory
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import requests

from nativedep.acquire.artifacts import ArtifactRole, InstalledArtifact
from nativedep.acquire.locator import RemoteArtifactLocator
from nativedep.core.download import DownloadProgress, fetch_file
from nativedep.core.exceptions import ArchiveCorrupt
from nativedep.core.filesystem import (
    ArchiveExtractor,
    extractor_for,
    list_files,
    replace_file,
)
from nativedep.core.identity import LibraryIdentity
from nativedep.core.layout import CacheLayout
from nativedep.core.platform import PlatformDescriptor

logger = logging.getLogger(__name__)


@dataclass
class PrebuiltResult:
    """Outcome of a prebuilt installation."""

    url: str
    archive_path: Path
    lib_dir: Path
    artifacts: List[InstalledArtifact]
    search_dir: Path
    downloaded: bool
    extracted: bool


def archive_names(url: str, extension: str) -> tuple:
    """
    Split an archive URL into its file name and base name.

    Example:
        >>> archive_names("https://host/n/libtensorflow-cpu-linux-x86_64.tar.gz", ".tar.gz")
        ('libtensorflow-cpu-linux-x86_64.tar.gz', 'libtensorflow-cpu-linux-x86_64')
    """
    short_name = url.rstrip("/").rsplit("/", 1)[-1]
    base_name = short_name
    if base_name.endswith(extension):
        base_name = base_name[: -len(extension)]
    return short_name, base_name


class PrebuiltInstaller:
    """
    Downloads, extracts and installs a prebuilt library archive.

    Example:
        >>> installer = PrebuiltInstaller(TENSORFLOW, platform, layout)
        >>> result = installer.install()
        >>> print(result.search_dir)
    """

    def __init__(
        self,
        identity: LibraryIdentity,
        platform: PlatformDescriptor,
        layout: CacheLayout,
        session: Optional[requests.Session] = None,
        locator: Optional[RemoteArtifactLocator] = None,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.identity = identity
        self.platform = platform
        self.layout = layout
        self.session = session
        self.locator = locator or RemoteArtifactLocator(identity, session=session)
        self.extractor = extractor or extractor_for(
            platform, identity.archive_member_prefix
        )

    def install(self, url: Optional[str] = None) -> PrebuiltResult:
        """
        Run the prebuilt path end to end.

        Args:
            url: Archive URL; located in the remote listing if None

        Returns:
            PrebuiltResult describing the installed libraries
        """
        if url is None:
            url = self.locator.locate(self.platform)
        logger.debug(f"binary_url = {url!r}")

        short_name, base_name = archive_names(url, self.platform.archive_extension)
        logger.debug(f"base_name = {base_name!r}")

        download_dir = self.layout.ensure_download_dir()
        archive_path = download_dir / short_name
        logger.debug(f"file_name = {archive_path}")

        downloaded = fetch_file(
            url,
            archive_path,
            session=self.session,
            progress_callback=_log_progress,
        )

        unpacked_dir = download_dir / base_name
        lib_dir = unpacked_dir / "lib"
        extracted = self.extract(archive_path, unpacked_dir, lib_dir)

        self.layout.ensure_output_dir()
        artifacts = self.copy_libraries(lib_dir, self.layout.output_dir)

        return PrebuiltResult(
            url=url,
            archive_path=archive_path,
            lib_dir=lib_dir,
            artifacts=artifacts,
            search_dir=self.layout.output_dir,
            downloaded=downloaded,
            extracted=extracted,
        )

    def expected_files(self, lib_dir: Path) -> List[Path]:
        """Library files the archive must provide for this platform."""
        files = []
        if self.platform.has_framework_library:
            files.append(lib_dir / self.identity.framework_file(self.platform))
        files.append(lib_dir / self.identity.library_file(self.platform))
        return files

    def extract(self, archive_path: Path, unpacked_dir: Path, lib_dir: Path) -> bool:
        """
        Extract the archive unless its libraries are already unpacked.

        Returns:
            True if the archive was extracted

        Raises:
            ArchiveCorrupt: If the archive cannot be read or lacks the libraries
        """
        expected = self.expected_files(lib_dir)
        if all(path.exists() for path in expected):
            logger.info(f"Libraries already unpacked in {lib_dir}, skipping extraction")
            return False

        self.extractor.extract(archive_path, unpacked_dir)

        missing = [path.name for path in expected if not path.exists()]
        if missing:
            raise ArchiveCorrupt(
                f"{archive_path.name} does not contain {', '.join(missing)}"
            )
        return True

    def copy_libraries(self, lib_dir: Path, output_dir: Path) -> List[InstalledArtifact]:
        """
        Copy every file directly under lib_dir into output_dir.

        Existing files of the same name are removed before copying.
        """
        framework_file = self.identity.framework_file(self.platform)
        library_file = self.identity.library_file(self.platform)

        artifacts = []
        for source in list_files(lib_dir):
            destination = replace_file(source, output_dir / source.name)
            if source.name == framework_file and self.platform.has_framework_library:
                artifact = InstalledArtifact(
                    destination, ArtifactRole.FRAMEWORK, self.identity.framework_name
                )
            elif source.name == library_file:
                artifact = InstalledArtifact(
                    destination, ArtifactRole.PRIMARY, self.identity.name
                )
            else:
                artifact = InstalledArtifact(destination, ArtifactRole.SUPPORT)
            artifacts.append(artifact)
        return artifacts


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(f"Downloaded {progress}")


__all__ = ["PrebuiltInstaller", "PrebuiltResult", "archive_names"]
