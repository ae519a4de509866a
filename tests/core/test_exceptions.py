"""
Unit tests for the exception hierarchy.
"""

import pytest

from nativedep.core.exceptions import (
    ArchiveCorrupt,
    ArtifactNotFound,
    ConfigurationError,
    DownloadFailed,
    FilesystemError,
    InsecureArchiveError,
    ListingParseError,
    NativeDepError,
    ProbeInconclusive,
    SubprocessFailed,
    UnsupportedToolVersion,
    VersionParseError,
)


@pytest.mark.parametrize(
    "error,stage",
    [
        (ConfigurationError("x"), "config"),
        (ProbeInconclusive("x"), "probe"),
        (ArtifactNotFound(".tar.gz"), "locate"),
        (ListingParseError("x"), "locate"),
        (DownloadFailed("https://x", "boom"), "download"),
        (ArchiveCorrupt("x"), "extract"),
        (InsecureArchiveError("x"), "extract"),
        (UnsupportedToolVersion("x"), "version-gate"),
        (VersionParseError("x"), "version-gate"),
        (SubprocessFailed("git clone"), "subprocess"),
        (FilesystemError("x"), "filesystem"),
    ],
)
def test_stages(error, stage):
    """Test every error names its pipeline stage."""
    assert isinstance(error, NativeDepError)
    assert error.stage == stage


def test_artifact_not_found_message():
    error = ArtifactNotFound("libtensorflow-cpu-linux-x86_64.tar.gz")
    assert str(error) == (
        "Unable to find a prebuilt artifact ending with "
        "libtensorflow-cpu-linux-x86_64.tar.gz"
    )


def test_download_failed_message():
    error = DownloadFailed("https://x/a.tar.gz", "Unexpected response code 404", 404)
    assert str(error) == "Unexpected response code 404 for https://x/a.tar.gz"
    assert error.status_code == 404


def test_subprocess_failed_message():
    assert str(SubprocessFailed("bazel build")) == "failed to execute bazel build"
    assert str(SubprocessFailed("bazel build", 2)) == (
        "failed to execute bazel build (exit status 2)"
    )
