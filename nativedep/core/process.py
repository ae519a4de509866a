"""
External process execution.

Every external program the pipeline starts (git, the configure script, the
build tool, pkg-config) goes through ProcessRunner so that failures are
translated in one place: a non-zero exit status becomes SubprocessFailed
carrying the exact command line.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from nativedep.core.exceptions import SubprocessFailed

logger = logging.getLogger(__name__)


@dataclass
class Command:
    """
    An external command to run.

    Attributes:
        program: Program name or path
        args: Arguments passed to the program
        cwd: Working directory (inherited if None)
        env: Variables layered over the current environment
        capture_output: Capture stdout/stderr instead of inheriting the streams
    """

    program: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[Path] = None
    env: Dict[str, str] = field(default_factory=dict)
    capture_output: bool = False

    @property
    def argv(self) -> List[str]:
        return [self.program, *[str(a) for a in self.args]]

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)

    def __str__(self) -> str:
        parts = []
        if self.env:
            parts.append(" ".join(f"{k}={v}" for k, v in sorted(self.env.items())))
        parts.append(self.command_line)
        text = " ".join(parts)
        if self.cwd:
            text += f" (in {self.cwd})"
        return text


@dataclass
class CommandResult:
    """Outcome of a successful command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


class ProcessRunner:
    """Runs commands synchronously and fails loudly on unsuccessful exit."""

    def run(self, command: Command) -> CommandResult:
        """
        Run a command to completion.

        Args:
            command: Command to run

        Returns:
            CommandResult; stdout/stderr are only filled when capture_output is
            set, decoded as UTF-8 with undecodable bytes replaced

        Raises:
            SubprocessFailed: If the program cannot be started or exits non-zero
        """
        env = None
        if command.env:
            env = {**os.environ, **command.env}

        logger.info(f"Executing {command}")
        try:
            completed = subprocess.run(
                command.argv,
                cwd=str(command.cwd) if command.cwd else None,
                env=env,
                capture_output=command.capture_output,
                text=True if command.capture_output else None,
                encoding="utf-8" if command.capture_output else None,
                errors="replace" if command.capture_output else None,
                check=False,
            )
        except OSError as e:
            logger.error(f"Could not start {command.program}: {e}")
            raise SubprocessFailed(command.command_line) from e

        if completed.returncode != 0:
            if command.capture_output and completed.stderr:
                logger.debug(completed.stderr.strip())
            raise SubprocessFailed(command.command_line, completed.returncode)

        logger.info(f"Command {command.command_line} finished successfully")
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


__all__ = ["Command", "CommandResult", "ProcessRunner"]
