"""
Strategy selection and the acquisition entry point.

``acquire()`` is what the host build calls. It decides how the library is
obtained, runs that strategy and emits the linker directives:

- SYSTEM:   a probe found the library; its directives are emitted as-is
- PREBUILT: supported platform and no forced source build
- SOURCE:   everything else
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

import requests

from nativedep.acquire.artifacts import (
    DirectiveEmitter,
    InstalledArtifact,
    LinkDirective,
    link_directives,
)
from nativedep.acquire.prebuilt import PrebuiltInstaller
from nativedep.acquire.probe import SystemProbe, default_probes
from nativedep.acquire.source import SourceBuilder
from nativedep.core.config import AcquireConfig
from nativedep.core.exceptions import ProbeInconclusive
from nativedep.core.identity import TENSORFLOW, LibraryIdentity
from nativedep.core.layout import CacheLayout
from nativedep.core.platform import PlatformDescriptor, detect_platform
from nativedep.core.process import ProcessRunner

logger = logging.getLogger(__name__)


class Strategy(Enum):
    """How the library is obtained."""

    SYSTEM = "system"
    PREBUILT = "prebuilt"
    SOURCE = "source"


@dataclass
class Selection:
    """Selected strategy, plus the probe directives for SYSTEM."""

    strategy: Strategy
    directives: List[LinkDirective] = field(default_factory=list)
    probe: Optional[str] = None


@dataclass
class AcquisitionResult:
    """Outcome of an acquisition run."""

    strategy: Strategy
    directives: List[LinkDirective]
    artifacts: List[InstalledArtifact] = field(default_factory=list)
    search_dir: Optional[Path] = None


class StrategySelector:
    """
    Decides among the system, prebuilt and source strategies.

    Only the probes have side effects (they may run pkg-config).
    """

    def __init__(
        self,
        config: AcquireConfig,
        platform: PlatformDescriptor,
        probes: Sequence[SystemProbe],
    ):
        self.config = config
        self.platform = platform
        self.probes = list(probes)

    def probe_system(self) -> Optional[Selection]:
        for probe in self.probes:
            if not probe.applies_to(self.platform):
                continue
            try:
                directives = probe.probe()
            except ProbeInconclusive as e:
                logger.debug(f"{probe.name} probe: {e}")
                continue
            return Selection(Strategy.SYSTEM, directives, probe.name)
        return None

    def select(self) -> Selection:
        found = self.probe_system()
        if found is not None:
            return found

        if not self.config.force_source and self.platform.supports_prebuilt():
            return Selection(Strategy.PREBUILT)
        return Selection(Strategy.SOURCE)


def acquire(
    config: AcquireConfig,
    identity: LibraryIdentity = TENSORFLOW,
    platform: Optional[PlatformDescriptor] = None,
    runner: Optional[ProcessRunner] = None,
    session: Optional[requests.Session] = None,
    emitter: Optional[DirectiveEmitter] = None,
    probes: Optional[Sequence[SystemProbe]] = None,
) -> AcquisitionResult:
    """
    Make the library available to the linker.

    Args:
        config: Resolved configuration
        identity: Library to acquire
        platform: Host platform (detected if None)
        runner: Process runner for external commands
        session: HTTP session for the prebuilt path
        emitter: Destination of the linker directives (stdout if None)
        probes: System probes (pkg-config and PATH scan if None)

    Returns:
        AcquisitionResult with the emitted directives

    Raises:
        NativeDepError: Any failure; nothing is retried
    """
    platform = platform or detect_platform(config.accelerator)
    runner = runner or ProcessRunner()
    emitter = emitter or DirectiveEmitter()
    if probes is None:
        probes = default_probes(identity, runner)

    logger.debug(f"Platform: {platform}")
    selection = StrategySelector(config, platform, probes).select()

    if selection.strategy is Strategy.SYSTEM:
        logger.info(
            f"Returning early because {identity.name} was already found "
            f"({selection.probe})"
        )
        emitter.emit_all(selection.directives)
        return AcquisitionResult(Strategy.SYSTEM, selection.directives)

    layout = CacheLayout.for_tag(
        config.out_dir, config.manifest_dir, identity.tag, config.download_dir
    )

    if selection.strategy is Strategy.PREBUILT:
        logger.info(f"Installing prebuilt {identity.name} for {platform}")
        installer = PrebuiltInstaller(identity, platform, layout, session=session)
        result = installer.install()
        artifacts, search_dir = result.artifacts, result.search_dir
    else:
        logger.info(f"Building {identity.name} {identity.tag} from source")
        builder = SourceBuilder(
            identity, platform, layout, config, runner=runner, emitter=emitter
        )
        result = builder.build()
        artifacts, search_dir = result.artifacts, result.search_dir

    directives = link_directives(artifacts, search_dir)
    emitter.emit_all(directives)
    return AcquisitionResult(selection.strategy, directives, artifacts, search_dir)


__all__ = [
    "Strategy",
    "Selection",
    "StrategySelector",
    "AcquisitionResult",
    "acquire",
]
