"""
Platform detection for nativedep.

This module detects the host platform (OS, architecture, ABI flavor) and pairs
it with the requested accelerator variant. The resulting descriptor decides
which acquisition strategy is possible and how remote artifacts and shared
library files are named.

Usage:
    from nativedep.core.platform import detect_platform

    platform_info = detect_platform(accelerator="cpu")
    print(platform_info.platform_string())
"""

import functools
import platform
import sysconfig
from dataclasses import dataclass


# Architectures for which prebuilt archives are published
PREBUILT_ARCHITECTURES = ("x64",)

# Operating systems for which prebuilt archives are published
PREBUILT_OPERATING_SYSTEMS = ("linux", "macos", "windows")


@dataclass(frozen=True)
class PlatformDescriptor:
    """
    Host platform as seen by the acquisition pipeline.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos', ...)
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', ...)
        abi: ABI flavor ('msvc' or 'gnu')
        accelerator: Accelerator variant ('cpu' or 'gpu')
    """

    os: str
    arch: str
    abi: str = "gnu"
    accelerator: str = "cpu"

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformDescriptor('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def is_msvc(self) -> bool:
        return self.abi == "msvc"

    @property
    def remote_os(self) -> str:
        """OS token used by the remote artifact store (macOS is 'darwin')."""
        return "darwin" if self.os == "macos" else self.os

    @property
    def remote_arch(self) -> str:
        """
        Architecture token used by the remote artifact store.

        Example:
            >>> PlatformDescriptor('linux', 'x64').remote_arch
            'x86_64'
        """
        arch_map = {
            "x64": "x86_64",
            "arm64": "aarch64",
            "x86": "x86",
            "arm": "arm",
        }
        return arch_map.get(self.arch, self.arch)

    @property
    def archive_extension(self) -> str:
        return ".zip" if self.is_msvc else ".tar.gz"

    @property
    def dll_prefix(self) -> str:
        return "" if self.os == "windows" else "lib"

    @property
    def dll_extension(self) -> str:
        if self.os == "windows":
            return "dll"
        if self.os == "macos":
            return "dylib"
        return "so"

    @property
    def dll_suffix(self) -> str:
        return f".{self.dll_extension}"

    @property
    def has_framework_library(self) -> bool:
        """The MSVC archives ship no separate framework library."""
        return not self.is_msvc

    def supports_prebuilt(self) -> bool:
        """Check whether prebuilt archives are published for this platform."""
        return (
            self.arch in PREBUILT_ARCHITECTURES
            and self.os in PREBUILT_OPERATING_SYSTEMS
        )

    def __str__(self) -> str:
        return f"{self.os}-{self.arch} [{self.abi}, {self.accelerator}]"


@functools.lru_cache(maxsize=4)
def detect_platform(accelerator: str = "cpu") -> PlatformDescriptor:
    """
    Detect current platform information.

    This function is cached - detection only runs once per process and
    accelerator variant.

    Args:
        accelerator: 'cpu' or 'gpu'

    Returns:
        PlatformDescriptor for the host
    """
    if accelerator not in ("cpu", "gpu"):
        raise ValueError(f"Unknown accelerator variant: {accelerator}")

    os_name = _detect_os()
    return PlatformDescriptor(
        os=os_name,
        arch=_detect_architecture(),
        abi=_detect_abi(os_name),
        accelerator=accelerator,
    )


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the raw lowercase
        system name for anything else
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    else:
        return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def _detect_abi(os_name: str) -> str:
    """
    Detect the ABI flavor.

    Windows interpreters built with MinGW (MSYS2) report a "mingw" platform
    tag and link against the GNU toolchain; all others there use MSVC.
    """
    if os_name != "windows":
        return "gnu"
    if sysconfig.get_platform().startswith("mingw"):
        return "gnu"
    return "msvc"


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformDescriptor",
    "PREBUILT_ARCHITECTURES",
    "PREBUILT_OPERATING_SYSTEMS",
    "detect_platform",
    "clear_platform_cache",
]
