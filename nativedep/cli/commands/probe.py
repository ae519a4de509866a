"""
Probe command implementation.

Checks whether the library is already installed on the system.
"""

import logging

from nativedep.acquire.artifacts import DirectiveEmitter
from nativedep.acquire.probe import default_probes
from nativedep.core.exceptions import ProbeInconclusive
from nativedep.core.identity import TENSORFLOW
from nativedep.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the probe command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 if the library was found, 1 otherwise
    """
    platform = detect_platform()
    emitter = DirectiveEmitter()

    for probe in default_probes(TENSORFLOW):
        if not probe.applies_to(platform):
            continue
        try:
            directives = probe.probe()
        except ProbeInconclusive as e:
            logger.info(f"{probe.name}: {e}")
            continue
        logger.info(f"{TENSORFLOW.name} found by {probe.name}")
        emitter.emit_all(directives)
        return 0

    logger.info(f"{TENSORFLOW.name} is not installed on this system")
    return 1
