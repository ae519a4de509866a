"""
System probes: is the library already installed?

A probe either returns the linker directives for the installation it found,
or raises ProbeInconclusive. Probe failures are never fatal.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Mapping, Optional

from nativedep.acquire.artifacts import LinkDirective
from nativedep.core.exceptions import ProbeInconclusive, SubprocessFailed
from nativedep.core.identity import LibraryIdentity
from nativedep.core.platform import PlatformDescriptor
from nativedep.core.process import Command, ProcessRunner

logger = logging.getLogger(__name__)


class SystemProbe(ABC):
    """Looks for an existing installation of the library."""

    name = "probe"

    @abstractmethod
    def probe(self) -> List[LinkDirective]:
        """
        Look for the library.

        Returns:
            Linker directives for the installation that was found

        Raises:
            ProbeInconclusive: If nothing was found
        """
        pass

    def applies_to(self, platform: PlatformDescriptor) -> bool:
        return True


class PkgConfigProbe(SystemProbe):
    """Queries pkg-config for the library's link flags."""

    name = "pkg-config"

    def __init__(
        self,
        identity: LibraryIdentity,
        runner: Optional[ProcessRunner] = None,
        program: str = "pkg-config",
    ):
        self.identity = identity
        self.runner = runner or ProcessRunner()
        self.program = program

    def probe(self) -> List[LinkDirective]:
        if shutil.which(self.program) is None:
            raise ProbeInconclusive(f"{self.program} is not installed")

        command = Command(
            self.program,
            ["--libs", self.identity.name],
            capture_output=True,
        )
        try:
            result = self.runner.run(command)
        except SubprocessFailed as e:
            raise ProbeInconclusive(
                f"{self.program} does not know {self.identity.name}"
            ) from e

        directives = parse_link_flags(result.stdout)
        if not any(d.kind == "link-lib" for d in directives):
            raise ProbeInconclusive(
                f"{self.program} reported no libraries for {self.identity.name}"
            )
        return directives


class SearchPathProbe(SystemProbe):
    """
    Scans the executable search path for the library's import library.

    On the MSVC ABI the DLL and its ``<name>.lib`` usually live in a directory
    on PATH rather than anywhere pkg-config knows about.
    """

    name = "search-path"

    def __init__(
        self,
        identity: LibraryIdentity,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.identity = identity
        self.env = os.environ if env is None else env

    def applies_to(self, platform: PlatformDescriptor) -> bool:
        return platform.is_msvc

    def probe(self) -> List[LinkDirective]:
        file_name = f"{self.identity.name}.lib"
        for entry in self.env.get("PATH", "").split(os.pathsep):
            if not entry:
                continue
            if (Path(entry) / file_name).exists():
                logger.debug(f"Found {file_name} in {entry}")
                return [
                    LinkDirective.link_lib(self.identity.name),
                    LinkDirective.link_search(Path(entry), "native"),
                ]
        raise ProbeInconclusive(f"{file_name} not found on PATH")


def parse_link_flags(flags: str) -> List[LinkDirective]:
    """
    Convert ``-L``/``-l`` linker flags into directives.

    Example:
        >>> [d.render() for d in parse_link_flags("-L/opt/tf/lib -ltensorflow")]
        ['cargo:rustc-link-search=native=/opt/tf/lib', 'cargo:rustc-link-lib=dylib=tensorflow']
    """
    directives = []
    for token in flags.split():
        if token.startswith("-L") and len(token) > 2:
            directives.append(LinkDirective.link_search(Path(token[2:]), "native"))
        elif token.startswith("-l") and len(token) > 2:
            directives.append(LinkDirective.link_lib(token[2:]))
    return directives


def default_probes(
    identity: LibraryIdentity, runner: Optional[ProcessRunner] = None
) -> List[SystemProbe]:
    """Probes in the order they are tried."""
    return [SearchPathProbe(identity), PkgConfigProbe(identity, runner)]


__all__ = [
    "SystemProbe",
    "PkgConfigProbe",
    "SearchPathProbe",
    "parse_link_flags",
    "default_probes",
]
