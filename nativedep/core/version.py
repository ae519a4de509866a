"""
Build tool version checks.

The external build tool reports its version as free-form text, e.g.::

    Build label: 0.5.4- (@non-git)
    Build target: bazel-out/...

The token after the label is parsed as major.minor.patch (a trailing hyphen
and any pre-release or build suffix are dropped) and compared with a minimum.
"""

import logging
import re
from dataclasses import dataclass

from packaging.version import Version

from nativedep.core.exceptions import UnsupportedToolVersion, VersionParseError

logger = logging.getLogger(__name__)

BUILD_LABEL = "Build label:"

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True)
class VersionRequirement:
    """Minimum version together with the version actually observed."""

    minimum: Version
    observed: Version

    @property
    def satisfied(self) -> bool:
        return self.observed >= self.minimum


def parse_version(token: str) -> Version:
    """
    Parse a major.minor.patch version string.

    Example:
        >>> parse_version("1.0.0-rc1")
        <Version('1.0.0')>

    Raises:
        VersionParseError: If the token is not a valid version
    """
    match = _SEMVER_RE.match(token)
    if not match:
        raise VersionParseError(f"Invalid version string: {token!r}")
    return Version(f"{match['major']}.{match['minor']}.{match['patch']}")


def parse_build_label(output: str, label: str = BUILD_LABEL) -> Version:
    """
    Extract the version from version-command output.

    Args:
        output: Text printed by the version command
        label: Prefix of the line holding the version

    Returns:
        Parsed version

    Raises:
        VersionParseError: If no line starts with the label or its token is invalid
    """
    for line in output.splitlines():
        if not line.startswith(label):
            continue
        fields = line[len(label):].split()
        if not fields:
            raise VersionParseError(f"No version after {label!r} in {line!r}")
        token = fields[0]
        if token.endswith("-"):
            token = token[:-1]
        return parse_version(token)

    raise VersionParseError(f"Did not find {label!r} in version output")


def check_version_output(
    output: str, minimum: str, label: str = BUILD_LABEL
) -> VersionRequirement:
    """
    Check version-command output against a minimum version.

    Args:
        output: Text printed by the version command
        minimum: Minimum accepted version (major.minor.patch)
        label: Prefix of the line holding the version

    Returns:
        Satisfied VersionRequirement

    Raises:
        VersionParseError: If the output holds no valid version
        UnsupportedToolVersion: If the observed version is below the minimum
    """
    requirement = VersionRequirement(
        minimum=parse_version(minimum),
        observed=parse_build_label(output, label),
    )
    logger.debug(f"Observed version {requirement.observed}, need {minimum}")
    if not requirement.satisfied:
        raise UnsupportedToolVersion(
            f"Installed version {requirement.observed} is less than "
            f"required version {minimum}"
        )
    return requirement


__all__ = [
    "BUILD_LABEL",
    "VersionRequirement",
    "parse_version",
    "parse_build_label",
    "check_version_output",
]
