"""
Identity of the native library managed by nativedep.

A LibraryIdentity is an immutable record of everything that names the library:
its link names, its build targets, where its sources and nightly binaries live
and which build tool version it needs. Components receive it at construction
instead of reading module-level constants, so tests can pass fixtures.
"""

from dataclasses import dataclass

from nativedep.core.platform import PlatformDescriptor


@dataclass(frozen=True)
class LibraryIdentity:
    """
    Fixed identity of a native library.

    Attributes:
        name: Link name of the primary library (e.g., 'tensorflow')
        framework_name: Link name of the companion framework library
        target: Build tool target of the primary library (without suffix)
        framework_target: Build tool target of the framework library
        repository: Git URL of the source repository
        tag: Git tag that is cloned for source builds
        min_build_tool_version: Minimum accepted build tool version
        listing_url: Bucket listing URL of the prebuilt nightly archives
        archive_member_prefix: Prefix of zip entries worth extracting
        gpu_env_var: Configure-script variable selecting GPU support
    """

    name: str
    framework_name: str
    target: str
    framework_target: str
    repository: str
    tag: str
    min_build_tool_version: str
    listing_url: str
    archive_member_prefix: str = "lib"
    gpu_env_var: str = "TF_NEED_CUDA"

    def library_file(self, platform: PlatformDescriptor) -> str:
        """
        Shared library file name of the primary library.

        Example:
            >>> TENSORFLOW.library_file(PlatformDescriptor('linux', 'x64'))
            'libtensorflow.so'
        """
        return f"{platform.dll_prefix}{self.name}.{platform.dll_extension}"

    def framework_file(self, platform: PlatformDescriptor) -> str:
        # The framework library keeps its 'lib' prefix on every platform
        return f"lib{self.framework_name}.{platform.dll_extension}"

    def archive_file_name(self, platform: PlatformDescriptor) -> str:
        """
        File name suffix of the prebuilt archive for a platform.

        Example:
            >>> TENSORFLOW.archive_file_name(PlatformDescriptor('macos', 'x64'))
            'libtensorflow-cpu-darwin-x86_64.tar.gz'
        """
        return (
            f"lib{self.name}-{platform.accelerator}-{platform.remote_os}-"
            f"{platform.remote_arch}{platform.archive_extension}"
        )

    def build_targets(self, platform: PlatformDescriptor) -> tuple:
        """Fully qualified build targets as (framework, primary)."""
        return (
            self.framework_target + platform.dll_suffix,
            self.target + platform.dll_suffix,
        )

    @staticmethod
    def target_path(target: str) -> str:
        """Relative output path of a build target ('pkg:name' -> 'pkg/name')."""
        return target.replace(":", "/")


TENSORFLOW = LibraryIdentity(
    name="tensorflow",
    framework_name="tensorflow_framework",
    target="tensorflow:libtensorflow",
    framework_target="tensorflow:libtensorflow_framework",
    repository="https://github.com/tensorflow/tensorflow.git",
    # The tag is not always 'v' + release version
    tag="v2.2.0",
    min_build_tool_version="0.5.4",
    listing_url="https://storage.googleapis.com/libtensorflow-nightly",
)


__all__ = ["LibraryIdentity", "TENSORFLOW"]
