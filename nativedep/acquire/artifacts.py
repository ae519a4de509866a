"""
Installed artifacts and the linker directives derived from them.

Both acquisition paths finish with a list of InstalledArtifact records and a
search directory. ``link_directives`` turns them into the instructions the
host build tool reads from our standard output.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "cargo:"


class ArtifactRole(Enum):
    """Logical role of an installed file."""

    FRAMEWORK = "framework"
    PRIMARY = "primary"
    SUPPORT = "support"  # e.g. import libraries, versioned copies


@dataclass(frozen=True)
class InstalledArtifact:
    """A library file made available to the linker."""

    path: Path
    role: ArtifactRole
    link_name: Optional[str] = None


@dataclass(frozen=True)
class LinkDirective:
    """
    A single instruction for the host build tool.

    Attributes:
        kind: 'link-lib', 'link-search' or 'error'
        value: Library name, directory or message
        search_kind: Optional qualifier for search paths (e.g., 'native')
    """

    kind: str
    value: str
    search_kind: Optional[str] = None

    def render(self) -> str:
        """
        Render the directive as a line of build-script output.

        Example:
            >>> LinkDirective("link-lib", "tensorflow").render()
            'cargo:rustc-link-lib=dylib=tensorflow'
        """
        if self.kind == "link-lib":
            return f"{DIRECTIVE_PREFIX}rustc-link-lib=dylib={self.value}"
        if self.kind == "link-search":
            if self.search_kind:
                return (
                    f"{DIRECTIVE_PREFIX}rustc-link-search="
                    f"{self.search_kind}={self.value}"
                )
            return f"{DIRECTIVE_PREFIX}rustc-link-search={self.value}"
        if self.kind == "error":
            return f"{DIRECTIVE_PREFIX}error={self.value}"
        raise ValueError(f"Unknown directive kind: {self.kind}")

    @classmethod
    def link_lib(cls, name: str) -> "LinkDirective":
        return cls("link-lib", name)

    @classmethod
    def link_search(
        cls, directory: Path, search_kind: Optional[str] = None
    ) -> "LinkDirective":
        return cls("link-search", str(directory), search_kind)

    @classmethod
    def error(cls, message: str) -> "LinkDirective":
        return cls("error", message)


def link_directives(
    artifacts: Iterable[InstalledArtifact], search_dir: Path
) -> List[LinkDirective]:
    """
    Build linker directives for installed artifacts.

    The framework library is linked before the primary library; support files
    produce no directive. The search path always comes last.
    """
    artifacts = list(artifacts)
    directives = []
    for role in (ArtifactRole.FRAMEWORK, ArtifactRole.PRIMARY):
        for artifact in artifacts:
            if artifact.role is role and artifact.link_name:
                directives.append(LinkDirective.link_lib(artifact.link_name))
    directives.append(LinkDirective.link_search(search_dir))
    return directives


class DirectiveEmitter:
    """Writes directives to a stream (standard output by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self.emitted: List[LinkDirective] = []

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def emit(self, directive: LinkDirective) -> None:
        line = directive.render()
        logger.debug(f"Emitting {line}")
        print(line, file=self.stream, flush=True)
        self.emitted.append(directive)

    def emit_all(self, directives: Iterable[LinkDirective]) -> None:
        for directive in directives:
            self.emit(directive)


__all__ = [
    "ArtifactRole",
    "InstalledArtifact",
    "LinkDirective",
    "DirectiveEmitter",
    "link_directives",
    "DIRECTIVE_PREFIX",
]
