"""
Centralized exception hierarchy for nativedep.

Every failure in the acquisition pipeline is fatal. Each exception carries
the name of the stage it belongs to so the CLI can report which step of the
build failed.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class NativeDepError(Exception):
    """Base exception for all nativedep errors."""

    stage = "acquire"


class ConfigurationError(NativeDepError):
    """Configuration is missing or malformed."""

    stage = "config"


# ============================================================================
# Detection Exceptions
# ============================================================================


class ProbeInconclusive(NativeDepError):
    """
    A system probe found nothing.

    This is a negative result rather than a failure: the strategy selector
    catches it and moves on to the next strategy.
    """

    stage = "probe"


# ============================================================================
# Prebuilt Exceptions
# ============================================================================


class ArtifactNotFound(NativeDepError):
    """No remote object matches the expected file name for this platform."""

    stage = "locate"

    def __init__(self, suffix: str):
        self.suffix = suffix
        super().__init__(f"Unable to find a prebuilt artifact ending with {suffix}")


class ListingParseError(NativeDepError):
    """The remote bucket listing could not be parsed."""

    stage = "locate"


class DownloadFailed(NativeDepError):
    """Non-success HTTP status or transport-level failure."""

    stage = "download"

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"{reason} for {url}")


class ArchiveCorrupt(NativeDepError):
    """Archive could not be read or did not contain the expected files."""

    stage = "extract"


class InsecureArchiveError(ArchiveCorrupt):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Source Build Exceptions
# ============================================================================


class UnsupportedToolVersion(NativeDepError):
    """Installed build tool is too old or its version cannot be determined."""

    stage = "version-gate"


class VersionParseError(UnsupportedToolVersion):
    """Version output did not contain a parseable version."""

    pass


class SubprocessFailed(NativeDepError):
    """An external process could not be started or exited unsuccessfully."""

    stage = "subprocess"

    def __init__(self, command_line: str, returncode: Optional[int] = None):
        self.command_line = command_line
        self.returncode = returncode
        if returncode is None:
            msg = f"failed to execute {command_line}"
        else:
            msg = f"failed to execute {command_line} (exit status {returncode})"
        super().__init__(msg)


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(NativeDepError):
    """Directory creation, file copy or file removal failed."""

    stage = "filesystem"
