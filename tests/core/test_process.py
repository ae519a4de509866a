"""
Tests for external process execution.

These start the running interpreter as a child process, so they need no
other tools installed.
"""

import sys

import pytest

from nativedep.core.exceptions import SubprocessFailed
from nativedep.core.process import Command, ProcessRunner


class TestCommand:
    """Test Command rendering."""

    def test_command_line_is_quoted(self):
        """Test arguments with spaces are shell-quoted."""
        command = Command("bash", ["-c", "yes ''|./configure"])
        assert command.command_line == "bash -c 'yes '\"'\"''\"'\"'|./configure'"

    def test_argv_stringifies_args(self, tmp_path):
        """Test path arguments are converted to strings."""
        command = Command("git", ["clone", tmp_path])
        assert command.argv == ["git", "clone", str(tmp_path)]

    def test_str_includes_env_and_cwd(self, tmp_path):
        """Test the log form shows environment and working directory."""
        command = Command("bazel", ["build"], cwd=tmp_path, env={"TF_NEED_CUDA": "0"})
        assert str(command) == f"TF_NEED_CUDA=0 bazel build (in {tmp_path})"


@pytest.mark.integration
class TestProcessRunner:
    """Test ProcessRunner with real child processes."""

    def test_capture_output(self):
        """Test stdout is captured as text."""
        result = ProcessRunner().run(
            Command(sys.executable, ["-c", "print('Build label: 1.2.3')"], capture_output=True)
        )
        assert result.returncode == 0
        assert result.stdout.strip() == "Build label: 1.2.3"

    def test_env_is_layered(self):
        """Test extra variables are added to the inherited environment."""
        script = "import os; print(os.environ['NATIVEDEP_TEST'], 'PATH' in os.environ)"
        result = ProcessRunner().run(
            Command(
                sys.executable,
                ["-c", script],
                env={"NATIVEDEP_TEST": "1"},
                capture_output=True,
            )
        )
        assert result.stdout.split() == ["1", "True"]

    def test_cwd(self, tmp_path):
        """Test the command runs in the requested directory."""
        ProcessRunner().run(
            Command(sys.executable, ["-c", "open('marker', 'w').close()"], cwd=tmp_path)
        )
        assert (tmp_path / "marker").exists()

    def test_nonzero_exit(self):
        """Test a non-zero exit raises SubprocessFailed with the status."""
        command = Command(sys.executable, ["-c", "import sys; sys.exit(3)"])

        with pytest.raises(SubprocessFailed) as exc_info:
            ProcessRunner().run(command)

        assert exc_info.value.returncode == 3
        assert exc_info.value.command_line == command.command_line
        assert "exit status 3" in str(exc_info.value)

    def test_missing_program(self):
        """Test a program that cannot be started raises SubprocessFailed."""
        with pytest.raises(SubprocessFailed, match="failed to execute") as exc_info:
            ProcessRunner().run(Command("nativedep-no-such-program-xyz"))

        assert exc_info.value.returncode is None

    def test_invalid_utf8_output_is_replaced(self):
        """Test undecodable output bytes do not break capturing."""
        script = "import sys; sys.stdout.buffer.write(b'Build label: 0.5.0 \\xff\\n')"
        result = ProcessRunner().run(
            Command(sys.executable, ["-c", script], capture_output=True)
        )
        assert result.stdout == "Build label: 0.5.0 \ufffd\n"
