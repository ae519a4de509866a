"""
Mock process execution for testing.

FakeRunner stands in for ProcessRunner: it records every command and answers
from a table of canned results instead of starting real programs.
"""

from typing import Callable, Dict, List, Optional

from nativedep.core.exceptions import SubprocessFailed
from nativedep.core.process import Command, CommandResult, ProcessRunner


class FakeRunner(ProcessRunner):
    """Records commands and returns canned results keyed by program name."""

    def __init__(self):
        self.commands: List[Command] = []
        self.outputs: Dict[str, str] = {}
        self.failures: Dict[str, int] = {}
        self.side_effects: Dict[str, Callable[[Command], None]] = {}

    def respond(self, program: str, stdout: str = "") -> "FakeRunner":
        self.outputs[program] = stdout
        return self

    def fail(self, program: str, returncode: int = 1) -> "FakeRunner":
        self.failures[program] = returncode
        return self

    def on(self, program: str, effect: Callable[[Command], None]) -> "FakeRunner":
        self.side_effects[program] = effect
        return self

    def run(self, command: Command) -> CommandResult:
        self.commands.append(command)
        if command.program in self.failures:
            raise SubprocessFailed(
                command.command_line, self.failures[command.program]
            )
        effect = self.side_effects.get(command.program)
        if effect:
            effect(command)
        return CommandResult(0, stdout=self.outputs.get(command.program, ""))

    def programs(self) -> List[str]:
        return [c.program for c in self.commands]

    def find(self, program: str, first_arg: Optional[str] = None) -> List[Command]:
        return [
            c
            for c in self.commands
            if c.program == program and (first_arg is None or c.args[:1] == [first_arg])
        ]
