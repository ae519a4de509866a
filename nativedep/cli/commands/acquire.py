"""
Acquire command implementation.

Runs the whole pipeline and prints linker directives to standard output.
"""

import logging
from pathlib import Path

from nativedep.acquire.selector import acquire
from nativedep.core.config import DEFAULT_CONFIG_FILE, AcquireConfig

logger = logging.getLogger(__name__)


def load_config(args) -> AcquireConfig:
    """
    Resolve configuration from the config file, environment and flags.

    Args:
        args: Parsed command-line arguments

    Returns:
        Resolved AcquireConfig
    """
    config_file = getattr(args, "config", None) or Path(DEFAULT_CONFIG_FILE)
    overrides = {
        "out_dir": getattr(args, "out_dir", None),
        "manifest_dir": getattr(args, "manifest_dir", None),
        "download_dir": getattr(args, "download_dir", None),
        "jobs": getattr(args, "jobs", None),
        "force_source": getattr(args, "force_source", None),
        "gpu": getattr(args, "gpu", None),
        "build_tool_opts": getattr(args, "build_tool_opts", None),
    }
    return AcquireConfig.load(config_file=config_file, overrides=overrides)


def run(args) -> int:
    """
    Run the acquire command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    config = load_config(args)
    result = acquire(config)
    logger.info(f"{result.strategy.value} strategy finished")
    return 0
