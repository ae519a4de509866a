"""
Locate command implementation.

Prints the URL of the newest prebuilt archive for this platform.
"""

import logging
from pathlib import Path

from nativedep.acquire.locator import RemoteArtifactLocator
from nativedep.core.config import DEFAULT_CONFIG_FILE, resolve_gpu
from nativedep.core.identity import TENSORFLOW
from nativedep.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the locate command.

    The accelerator variant is resolved like ``acquire`` does: --gpu, then
    the environment, then the configuration file.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config_file = getattr(args, "config", None) or Path(DEFAULT_CONFIG_FILE)
    gpu = resolve_gpu(config_file=config_file, override=getattr(args, "gpu", None))
    platform = detect_platform("gpu" if gpu else "cpu")
    if not platform.supports_prebuilt():
        logger.warning(f"No prebuilt archives are published for {platform}")

    url = RemoteArtifactLocator(TENSORFLOW).locate(platform)
    print(url)
    return 0
