"""
Core functionality for nativedep.

This package contains the foundational modules that the acquisition
strategies depend on.
"""

from .config import AcquireConfig, load_yaml_config

from .download import DownloadProgress, fetch_file, fetch_text

from .exceptions import (
    NativeDepError,
    ConfigurationError,
    ProbeInconclusive,
    ArtifactNotFound,
    ListingParseError,
    DownloadFailed,
    ArchiveCorrupt,
    InsecureArchiveError,
    UnsupportedToolVersion,
    VersionParseError,
    SubprocessFailed,
    FilesystemError,
)

from .filesystem import (
    ArchiveExtractor,
    TarGzExtractor,
    ZipExtractor,
    extractor_for,
    ensure_directory,
    replace_file,
)

from .identity import LibraryIdentity, TENSORFLOW

from .layout import BuildMarker, CacheLayout

from .platform import PlatformDescriptor, detect_platform, clear_platform_cache

from .process import Command, CommandResult, ProcessRunner

from .version import VersionRequirement, check_version_output, parse_build_label

__all__ = [
    # Configuration
    "AcquireConfig",
    "load_yaml_config",
    # Download
    "DownloadProgress",
    "fetch_file",
    "fetch_text",
    # Exceptions
    "NativeDepError",
    "ConfigurationError",
    "ProbeInconclusive",
    "ArtifactNotFound",
    "ListingParseError",
    "DownloadFailed",
    "ArchiveCorrupt",
    "InsecureArchiveError",
    "UnsupportedToolVersion",
    "VersionParseError",
    "SubprocessFailed",
    "FilesystemError",
    # Filesystem
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "extractor_for",
    "ensure_directory",
    "replace_file",
    # Identity and layout
    "LibraryIdentity",
    "TENSORFLOW",
    "BuildMarker",
    "CacheLayout",
    # Platform
    "PlatformDescriptor",
    "detect_platform",
    "clear_platform_cache",
    # Processes and versions
    "Command",
    "CommandResult",
    "ProcessRunner",
    "VersionRequirement",
    "check_version_output",
    "parse_build_label",
]
