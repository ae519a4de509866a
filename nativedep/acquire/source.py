"""
Build the library from source with an external build tool.

The build is a state machine whose steps are each guarded by a durable
marker or artifact, so an interrupted build resumes where it stopped:

    DETECT        both libraries already in the lib dir -> DONE
    VERSION_GATE  build tool version >= minimum, else abort
    CLONE         skipped if <source>/.git exists
    CONFIGURE     skipped if the configure marker exists; marker set on success
    COMPILE       build tool invoked for both targets
    INSTALL       built libraries copied into the lib dir

Configuring runs a clean of the build tool's cache, so it must never run
twice over a partially compiled tree.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from nativedep.acquire.artifacts import (
    ArtifactRole,
    DirectiveEmitter,
    InstalledArtifact,
    LinkDirective,
)
from nativedep.core.config import AcquireConfig
from nativedep.core.exceptions import SubprocessFailed, UnsupportedToolVersion
from nativedep.core.filesystem import copy_file
from nativedep.core.identity import LibraryIdentity
from nativedep.core.layout import CacheLayout
from nativedep.core.platform import PlatformDescriptor
from nativedep.core.process import Command, ProcessRunner
from nativedep.core.version import check_version_output

logger = logging.getLogger(__name__)

BUILD_TOOL = "bazel"


class BuildState(Enum):
    """States of the source build."""

    DETECT = "detect"
    VERSION_GATE = "version-gate"
    CLONE = "clone"
    CONFIGURE = "configure"
    COMPILE = "compile"
    INSTALL = "install"
    DONE = "done"


@dataclass
class SourceBuildResult:
    """Outcome of a source build."""

    lib_dir: Path
    artifacts: List[InstalledArtifact]
    built: bool
    visited: List[BuildState] = field(default_factory=list)

    @property
    def search_dir(self) -> Path:
        return self.lib_dir


class SourceBuilder:
    """
    Drives the source build state machine.

    Example:
        >>> builder = SourceBuilder(TENSORFLOW, platform, layout, config)
        >>> result = builder.build()
        >>> print(result.lib_dir)
    """

    def __init__(
        self,
        identity: LibraryIdentity,
        platform: PlatformDescriptor,
        layout: CacheLayout,
        config: AcquireConfig,
        runner: Optional[ProcessRunner] = None,
        emitter: Optional[DirectiveEmitter] = None,
        build_tool: str = BUILD_TOOL,
    ):
        self.identity = identity
        self.platform = platform
        self.layout = layout
        self.config = config
        self.runner = runner or ProcessRunner()
        self.emitter = emitter or DirectiveEmitter()
        self.build_tool = build_tool

        self._handlers: Dict[BuildState, Callable[[], BuildState]] = {
            BuildState.DETECT: self._detect,
            BuildState.VERSION_GATE: self._version_gate,
            BuildState.CLONE: self._clone,
            BuildState.CONFIGURE: self._configure,
            BuildState.COMPILE: self._compile,
            BuildState.INSTALL: self._install,
        }

    @property
    def framework_library_path(self) -> Path:
        return self.layout.lib_dir / self.identity.framework_file(self.platform)

    @property
    def library_path(self) -> Path:
        # Source builds always produce lib-prefixed files
        name = f"lib{self.identity.name}{self.platform.dll_suffix}"
        return self.layout.lib_dir / name

    def build(self) -> SourceBuildResult:
        """
        Run the state machine from DETECT to DONE.

        Raises:
            UnsupportedToolVersion: If the build tool is missing or too old
            SubprocessFailed: If any external step fails
            FilesystemError: If the libraries cannot be installed
        """
        logger.debug(f"output = {self.layout.output_dir}")
        logger.debug(f"source = {self.layout.source_dir}")
        logger.debug(f"lib_dir = {self.layout.lib_dir}")

        visited = []
        state = BuildState.DETECT
        while state is not BuildState.DONE:
            visited.append(state)
            logger.debug(f"Entering build state {state.value}")
            state = self._handlers[state]()

        return SourceBuildResult(
            lib_dir=self.layout.lib_dir,
            artifacts=self.artifacts(),
            built=BuildState.COMPILE in visited,
            visited=visited,
        )

    def artifacts(self) -> List[InstalledArtifact]:
        return [
            InstalledArtifact(
                self.framework_library_path,
                ArtifactRole.FRAMEWORK,
                self.identity.framework_name,
            ),
            InstalledArtifact(
                self.library_path, ArtifactRole.PRIMARY, self.identity.name
            ),
        ]

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _detect(self) -> BuildState:
        self.layout.ensure_lib_dir()
        if self.library_path.exists() and self.framework_library_path.exists():
            logger.info(
                f"{self.library_path} and {self.framework_library_path} "
                "already exist, not building"
            )
            return BuildState.DONE
        return BuildState.VERSION_GATE

    def _version_gate(self) -> BuildState:
        minimum = self.identity.min_build_tool_version
        try:
            result = self.runner.run(
                Command(self.build_tool, ["version"], capture_output=True)
            )
            check_version_output(result.stdout, minimum)
        except (UnsupportedToolVersion, SubprocessFailed) as e:
            self._reject_build_tool(minimum, e)
        return BuildState.CLONE

    def _reject_build_tool(self, minimum: str, error: Exception) -> None:
        message = (
            f"Bazel must be installed at version {minimum} or greater. "
            f"(Error: {error})"
        )
        self.emitter.emit(LinkDirective.error(message))
        raise UnsupportedToolVersion(message) from error

    def _clone(self) -> BuildState:
        if self.layout.clone_marker.is_set():
            logger.info(f"{self.layout.source_dir} already cloned")
            return BuildState.CONFIGURE

        self.runner.run(
            Command(
                "git",
                [
                    "clone",
                    f"--branch={self.identity.tag}",
                    "--recursive",
                    self.identity.repository,
                    str(self.layout.source_dir),
                ],
            )
        )
        return BuildState.CONFIGURE

    def _configure(self) -> BuildState:
        marker = self.layout.configure_marker
        if marker.is_set():
            logger.info("Source tree already configured")
            return BuildState.COMPILE

        self.runner.run(
            Command(
                "bash",
                ["-c", "yes ''|./configure"],
                cwd=self.layout.source_dir,
                env={self.identity.gpu_env_var: "1" if self.config.gpu else "0"},
            )
        )
        marker.set()
        return BuildState.COMPILE

    def _compile(self) -> BuildState:
        framework_target, target = self.identity.build_targets(self.platform)
        args = [
            "build",
            f"--jobs={self.config.job_count}",
            "--compilation_mode=opt",
            "--copt=-march=native",
            *self.config.build_tool_opts,
            framework_target,
            target,
        ]
        self.runner.run(Command(self.build_tool, args, cwd=self.layout.source_dir))
        return BuildState.INSTALL

    def _install(self) -> BuildState:
        bazel_bin = self.layout.source_dir / "bazel-bin"
        framework_target, target = self.identity.build_targets(self.platform)
        copy_file(
            bazel_bin / self.identity.target_path(framework_target),
            self.framework_library_path,
        )
        copy_file(bazel_bin / self.identity.target_path(target), self.library_path)
        return BuildState.DONE


__all__ = ["BuildState", "SourceBuilder", "SourceBuildResult", "BUILD_TOOL"]
