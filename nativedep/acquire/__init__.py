"""
Acquisition strategies for nativedep.

This package provides:
- System probes (pkg-config, executable search path)
- Remote artifact discovery for prebuilt nightly archives
- Prebuilt download/extract/install pipeline
- Source build state machine
- Strategy selection and the acquire() entry point
"""

from nativedep.acquire.artifacts import (
    ArtifactRole,
    DirectiveEmitter,
    InstalledArtifact,
    LinkDirective,
    link_directives,
)
from nativedep.acquire.locator import (
    RemoteArtifactLocator,
    RemoteObject,
    RemoteObjectIndex,
    parse_listing,
)
from nativedep.acquire.prebuilt import PrebuiltInstaller, PrebuiltResult
from nativedep.acquire.probe import (
    PkgConfigProbe,
    SearchPathProbe,
    SystemProbe,
    default_probes,
)
from nativedep.acquire.selector import (
    AcquisitionResult,
    Strategy,
    StrategySelector,
    acquire,
)
from nativedep.acquire.source import BuildState, SourceBuilder, SourceBuildResult

__all__ = [
    # Artifacts
    "ArtifactRole",
    "DirectiveEmitter",
    "InstalledArtifact",
    "LinkDirective",
    "link_directives",
    # Locator
    "RemoteArtifactLocator",
    "RemoteObject",
    "RemoteObjectIndex",
    "parse_listing",
    # Strategies
    "PrebuiltInstaller",
    "PrebuiltResult",
    "PkgConfigProbe",
    "SearchPathProbe",
    "SystemProbe",
    "default_probes",
    "BuildState",
    "SourceBuilder",
    "SourceBuildResult",
    # Entry point
    "AcquisitionResult",
    "Strategy",
    "StrategySelector",
    "acquire",
]
