"""
On-disk layout used by an acquisition run.

Directory Structure:
    <download dir>/                 : Downloaded archives (TF_RUST_DOWNLOAD_DIR or OUT_DIR)
        <archive base name>/lib/    : Extracted prebuilt libraries
    <out dir>/                      : Installed prebuilt libraries
        lib-<tag>/                  : Libraries harvested from a source build
    <manifest dir>/target/source-<tag>/
        .git/                       : Clone marker
        .nativedep-configured       : Configure marker
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nativedep.core.filesystem import ensure_directory, touch_file

logger = logging.getLogger(__name__)

CONFIGURE_MARKER = ".nativedep-configured"


@dataclass(frozen=True)
class CacheLayout:
    """
    Directories used by the acquisition pipeline.

    Nothing is created on construction; the ``ensure_*`` helpers create
    directories lazily and are safe to call repeatedly.
    """

    download_dir: Path
    lib_dir: Path
    output_dir: Path
    source_dir: Path

    @classmethod
    def for_tag(
        cls,
        out_dir: Path,
        manifest_dir: Path,
        tag: str,
        download_dir: Optional[Path] = None,
    ) -> "CacheLayout":
        """
        Build the layout for a library tag.

        Args:
            out_dir: Build tool output directory
            manifest_dir: Manifest directory of the host package
            tag: Source tag of the library
            download_dir: Override for the archive cache directory
        """
        out_dir = Path(out_dir)
        return cls(
            download_dir=Path(download_dir) if download_dir else out_dir,
            lib_dir=out_dir / f"lib-{tag}",
            output_dir=out_dir,
            source_dir=Path(manifest_dir) / "target" / f"source-{tag}",
        )

    def ensure_download_dir(self) -> Path:
        return ensure_directory(self.download_dir)

    def ensure_lib_dir(self) -> Path:
        return ensure_directory(self.lib_dir)

    def ensure_output_dir(self) -> Path:
        return ensure_directory(self.output_dir)

    @property
    def clone_marker(self) -> "BuildMarker":
        return BuildMarker(self.source_dir / ".git")

    @property
    def configure_marker(self) -> "BuildMarker":
        return BuildMarker(self.source_dir / CONFIGURE_MARKER)


@dataclass(frozen=True)
class BuildMarker:
    """
    Sentinel file recording that a side-effecting step completed.

    Only the existence of the path matters, never its content. A marker is
    set after its step succeeded and never before.
    """

    path: Path

    def is_set(self) -> bool:
        return self.path.exists()

    def set(self) -> None:
        if self.is_set():
            return
        logger.debug(f"Setting marker {self.path}")
        touch_file(self.path)


__all__ = ["CacheLayout", "BuildMarker", "CONFIGURE_MARKER"]
