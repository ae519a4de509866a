"""
Unit tests for platform detection.
"""

import pytest
from unittest.mock import patch

from nativedep.core.platform import (
    PlatformDescriptor,
    clear_platform_cache,
    detect_platform,
)


@pytest.fixture(autouse=True)
def fresh_detection():
    clear_platform_cache()
    yield
    clear_platform_cache()


class TestDetectPlatform:
    """Test detect_platform()."""

    @pytest.mark.parametrize(
        "system,machine,expected",
        [
            ("Linux", "x86_64", ("linux", "x64", "gnu")),
            ("Linux", "aarch64", ("linux", "arm64", "gnu")),
            ("Darwin", "arm64", ("macos", "arm64", "gnu")),
            ("Darwin", "x86_64", ("macos", "x64", "gnu")),
            ("Windows", "AMD64", ("windows", "x64", "msvc")),
            ("FreeBSD", "amd64", ("freebsd", "x64", "gnu")),
        ],
    )
    def test_detection(self, system, machine, expected):
        """Test OS, architecture and ABI normalization."""
        with patch("platform.system", return_value=system), patch(
            "platform.machine", return_value=machine
        ):
            detected = detect_platform()

        assert (detected.os, detected.arch, detected.abi) == expected
        assert detected.accelerator == "cpu"

    @pytest.mark.parametrize(
        "platform_tag,abi", [("win-amd64", "msvc"), ("mingw_x86_64", "gnu")]
    )
    def test_windows_abi(self, platform_tag, abi):
        """Test MinGW interpreters on Windows are told apart from MSVC ones."""
        with patch("platform.system", return_value="Windows"), patch(
            "platform.machine", return_value="AMD64"
        ), patch("sysconfig.get_platform", return_value=platform_tag):
            detected = detect_platform()

        assert detected.abi == abi
        assert detected.archive_extension == (".zip" if abi == "msvc" else ".tar.gz")

    def test_gpu_accelerator(self):
        """Test the accelerator variant is carried through."""
        assert detect_platform("gpu").accelerator == "gpu"

    def test_unknown_accelerator(self):
        """Test unknown accelerator raises ValueError."""
        with pytest.raises(ValueError, match="Unknown accelerator"):
            detect_platform("tpu")

    def test_detection_is_cached(self):
        """Test repeated calls return the same object."""
        assert detect_platform() is detect_platform()


class TestPlatformDescriptor:
    """Test PlatformDescriptor naming rules."""

    @pytest.mark.parametrize(
        "descriptor,supported",
        [
            (PlatformDescriptor("linux", "x64"), True),
            (PlatformDescriptor("macos", "x64"), True),
            (PlatformDescriptor("windows", "x64", "msvc"), True),
            (PlatformDescriptor("linux", "arm64"), False),
            (PlatformDescriptor("macos", "arm64"), False),
            (PlatformDescriptor("freebsd", "x64"), False),
        ],
    )
    def test_supports_prebuilt(self, descriptor, supported):
        """Test only x64 on the three published systems supports prebuilt."""
        assert descriptor.supports_prebuilt() is supported

    def test_linux_names(self, linux_platform):
        """Test Linux naming."""
        assert linux_platform.remote_os == "linux"
        assert linux_platform.remote_arch == "x86_64"
        assert linux_platform.archive_extension == ".tar.gz"
        assert linux_platform.dll_suffix == ".so"
        assert linux_platform.dll_prefix == "lib"
        assert linux_platform.has_framework_library

    def test_macos_names(self, macos_platform):
        """Test macOS maps to 'darwin' remotely and uses .dylib."""
        assert macos_platform.remote_os == "darwin"
        assert macos_platform.dll_suffix == ".dylib"

    def test_windows_names(self, windows_platform):
        """Test Windows uses zip archives and unprefixed DLLs."""
        assert windows_platform.is_msvc
        assert windows_platform.archive_extension == ".zip"
        assert windows_platform.dll_suffix == ".dll"
        assert windows_platform.dll_prefix == ""
        assert not windows_platform.has_framework_library

    def test_str(self, linux_platform):
        """Test human-readable form."""
        assert str(linux_platform) == "linux-x64 [gnu, cpu]"
        assert linux_platform.platform_string() == "linux-x64"
