"""Configuration layer for nativedep.

Settings come from three layers, highest precedence first:

1. Explicit overrides (command-line flags)
2. Environment variables set by the user or the host build tool
3. An optional ``nativedep.yaml`` file

Environment variables:
    TF_RUST_BUILD_FROM_SRC         'true' forces the source build path
    TF_RUST_DOWNLOAD_DIR           cache directory for downloaded archives
    TF_RUST_BAZEL_OPTS             extra flags for the build tool (whitespace-split)
    CARGO_FEATURE_TENSORFLOW_GPU   set when the GPU variant is requested
    OUT_DIR                        build tool output directory
    CARGO_MANIFEST_DIR             manifest directory of the host package
    NUM_JOBS                       job count for the external build tool
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from nativedep.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_FORCE_SOURCE = "TF_RUST_BUILD_FROM_SRC"
ENV_DOWNLOAD_DIR = "TF_RUST_DOWNLOAD_DIR"
ENV_BUILD_TOOL_OPTS = "TF_RUST_BAZEL_OPTS"
ENV_GPU_FEATURE = "CARGO_FEATURE_TENSORFLOW_GPU"
ENV_OUT_DIR = "OUT_DIR"
ENV_MANIFEST_DIR = "CARGO_MANIFEST_DIR"
ENV_NUM_JOBS = "NUM_JOBS"

DEFAULT_CONFIG_FILE = "nativedep.yaml"

_KNOWN_KEYS = {
    "force_source",
    "download_dir",
    "build_tool_opts",
    "gpu",
    "out_dir",
    "manifest_dir",
    "jobs",
}


@dataclass
class AcquireConfig:
    """Resolved configuration for one acquisition run."""

    out_dir: Path
    manifest_dir: Path
    force_source: bool = False
    download_dir: Optional[Path] = None
    build_tool_opts: List[str] = field(default_factory=list)
    gpu: bool = False
    jobs: Optional[int] = None

    @property
    def accelerator(self) -> str:
        return "gpu" if self.gpu else "cpu"

    @property
    def job_count(self) -> int:
        """Parallelism handed to the external build tool."""
        return self.jobs or os.cpu_count() or 1

    @classmethod
    def load(
        cls,
        env: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "AcquireConfig":
        """
        Build configuration from file, environment and overrides.

        Args:
            env: Environment mapping (defaults to os.environ)
            config_file: Optional YAML file; a missing file is ignored
            overrides: Values that win over every other layer; None entries
                are ignored

        Returns:
            Resolved AcquireConfig

        Raises:
            ConfigurationError: If the file is invalid or out_dir is unset
        """
        values = layered_values(env, config_file, overrides)

        out_dir = values.get("out_dir")
        if not out_dir:
            raise ConfigurationError(
                f"Output directory is not set (use --out-dir or {ENV_OUT_DIR})"
            )

        download_dir = values.get("download_dir")
        config = cls(
            out_dir=Path(out_dir),
            manifest_dir=Path(values.get("manifest_dir") or Path.cwd()),
            force_source=_as_bool(values.get("force_source", False)),
            download_dir=Path(download_dir) if download_dir else None,
            build_tool_opts=_as_opts(values.get("build_tool_opts")),
            gpu=_as_bool(values.get("gpu", False)),
            jobs=_as_int(values.get("jobs"), "jobs"),
        )
        logger.debug(f"Resolved configuration: {config}")
        return config


def layered_values(
    env: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge raw settings from file, environment and overrides.

    Values are not validated; None overrides are ignored.
    """
    env = os.environ if env is None else env

    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(load_yaml_config(config_file))
    values.update(_from_environment(env))
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})
    return values


def resolve_gpu(
    env: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
    override: Optional[bool] = None,
) -> bool:
    """Resolve only the accelerator choice, without requiring output directories."""
    values = layered_values(env, config_file, {"gpu": override})
    return _as_bool(values.get("gpu", False))


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Configuration dictionary (empty dict if the file doesn't exist)

    Raises:
        ConfigurationError: If YAML parsing fails or the document is not a mapping
    """
    config_file = Path(config_file)
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_file} must be a mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

    return {k: v for k, v in data.items() if k in _KNOWN_KEYS}


def _from_environment(env: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if ENV_FORCE_SOURCE in env:
        values["force_source"] = env[ENV_FORCE_SOURCE] == "true"
    if env.get(ENV_DOWNLOAD_DIR):
        values["download_dir"] = env[ENV_DOWNLOAD_DIR]
    if ENV_BUILD_TOOL_OPTS in env:
        values["build_tool_opts"] = env[ENV_BUILD_TOOL_OPTS]
    if ENV_GPU_FEATURE in env:
        values["gpu"] = True
    if env.get(ENV_OUT_DIR):
        values["out_dir"] = env[ENV_OUT_DIR]
    if env.get(ENV_MANIFEST_DIR):
        values["manifest_dir"] = env[ENV_MANIFEST_DIR]
    if env.get(ENV_NUM_JOBS):
        values["jobs"] = env[ENV_NUM_JOBS]
    return values


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_opts(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def _as_int(value: Any, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from e


__all__ = [
    "AcquireConfig",
    "load_yaml_config",
    "layered_values",
    "resolve_gpu",
    "DEFAULT_CONFIG_FILE",
    "ENV_FORCE_SOURCE",
    "ENV_DOWNLOAD_DIR",
    "ENV_BUILD_TOOL_OPTS",
    "ENV_GPU_FEATURE",
    "ENV_OUT_DIR",
    "ENV_MANIFEST_DIR",
    "ENV_NUM_JOBS",
]
