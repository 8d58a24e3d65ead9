"""Tests for CommandRunner."""

from __future__ import annotations

import os
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from cfs.config.models import SandboxConfig
from cfs.core.runner import BLOCKED_SEQUENCES, CommandRunner, validate_command
from cfs.errors import (
    CommandTimeoutError,
    ConfigurationError,
    ExecutionError,
    InvalidInputError,
)


def _runner(base_dir: Path, **kwargs) -> CommandRunner:
    return CommandRunner(SandboxConfig(base_dir=base_dir, **kwargs))


class TestValidateCommand:
    @pytest.mark.parametrize("command", ["", "   ", "\t\n", None])
    def test_blank_rejected(self, command: str | None) -> None:
        with pytest.raises(InvalidInputError, match="cannot be empty"):
            validate_command(command)

    @pytest.mark.parametrize(
        "command",
        [
            "echo hi; rm -rf /",
            "cat ../secret",
            "true && echo yes",
            "false || echo no",
            "ls | wc -l",
            "echo `whoami`",
        ],
    )
    def test_denylist_rejected(self, command: str) -> None:
        with pytest.raises(InvalidInputError, match="Invalid characters"):
            validate_command(command)

    @pytest.mark.parametrize(
        "command",
        ["echo $(whoami)", "echo hi > out.txt", "cat < in.txt", "sleep 1 &", "echo a\necho b"],
    )
    def test_other_metacharacters_pass(self, command: str) -> None:
        assert validate_command(command) == command

    def test_blocked_sequences(self) -> None:
        assert set(BLOCKED_SEQUENCES) == {"..", ";", "&&", "||", "|", "`"}


class TestCommandRunnerValidation:
    @pytest.mark.parametrize("command", ["", "   "])
    async def test_blank_command(self, tmp_path: Path, command: str) -> None:
        with pytest.raises(InvalidInputError):
            await _runner(tmp_path).execute(command)

    async def test_semicolon_rejected_without_spawning(self, tmp_path: Path) -> None:
        with patch("asyncio.create_subprocess_exec") as spawn:
            with pytest.raises(InvalidInputError):
                await _runner(tmp_path).execute("echo hi; rm -rf /")
        spawn.assert_not_called()

    async def test_missing_sandbox_dir(self, tmp_path: Path) -> None:
        runner = _runner(tmp_path / "missing")
        with pytest.raises(ConfigurationError, match="Sandbox directory misconfiguration"):
            await runner.execute("echo hello")

    async def test_sandbox_path_is_a_file(self, tmp_path: Path) -> None:
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("x")
        with pytest.raises(ConfigurationError):
            await _runner(not_a_dir).execute("echo hello")


class TestCommandRunnerExecution:
    async def test_echo(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("echo hello")
        assert result.ok
        assert result.exit_code == 0
        assert result.output == "hello" + os.linesep

    async def test_runs_in_sandbox_dir(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("")
        result = await _runner(tmp_path).execute("ls")
        assert "marker.txt" in result.output

    async def test_stderr_merged(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("echo out\necho err >&2")
        assert result.output == f"out{os.linesep}err{os.linesep}"

    async def test_line_order_and_terminators(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("printf 'a\\nb\\r\\nc'")
        assert result.output == f"a{os.linesep}b{os.linesep}c{os.linesep}"

    async def test_no_output(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("true")
        assert result.ok
        assert result.output == ""

    async def test_nonzero_exit(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("echo failing\nexit 3")
        assert not result.ok
        assert result.exit_code == 3
        assert result.output == "failing" + os.linesep

    async def test_unknown_program(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("definitely_not_a_command_xyz")
        assert result.exit_code == 127

    async def test_redirection_is_not_blocked(self, tmp_path: Path) -> None:
        result = await _runner(tmp_path).execute("echo written > out.txt")
        assert result.ok
        assert (tmp_path / "out.txt").read_text() == "written\n"

    async def test_spawn_failure(self, tmp_path: Path) -> None:
        runner = _runner(tmp_path, shell=str(tmp_path / "no-such-shell"))
        with pytest.raises(ExecutionError, match="Error executing command"):
            await runner.execute("echo hello")


class TestCommandRunnerTimeout:
    async def test_timeout_raises(self, tmp_path: Path) -> None:
        start = time.monotonic()
        with pytest.raises(CommandTimeoutError) as exc_info:
            await _runner(tmp_path).execute("sleep 10", timeout=0.3)
        assert exc_info.value.timeout == 0.3
        assert time.monotonic() - start < 5

    @pytest.mark.parametrize("timeout", [0, -1.0])
    async def test_non_positive_timeout_rejected(self, tmp_path: Path, timeout: float) -> None:
        with patch("asyncio.create_subprocess_exec") as spawn:
            with pytest.raises(InvalidInputError, match="timeout must be positive"):
                await _runner(tmp_path).execute("echo hello", timeout=timeout)
        spawn.assert_not_called()

    async def test_config_timeout_used_by_default(self, tmp_path: Path) -> None:
        with pytest.raises(CommandTimeoutError) as exc_info:
            await _runner(tmp_path, timeout=0.3).execute("sleep 10")
        assert exc_info.value.timeout == 0.3

    async def test_partial_output_discarded(self, tmp_path: Path) -> None:
        with pytest.raises(CommandTimeoutError) as exc_info:
            await _runner(tmp_path).execute("echo partial\nsleep 10", timeout=0.5)
        assert "partial" not in str(exc_info.value)

    async def test_process_killed_on_timeout(self, tmp_path: Path) -> None:
        with pytest.raises(CommandTimeoutError):
            await _runner(tmp_path).execute("echo $$ > shell.pid\nsleep 30", timeout=1.0)
        pid = int((tmp_path / "shell.pid").read_text().strip())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    async def test_background_child_holding_pipe_times_out(self, tmp_path: Path) -> None:
        start = time.monotonic()
        with pytest.raises(CommandTimeoutError):
            await _runner(tmp_path).execute("sleep 30 &\necho started", timeout=0.5)
        assert time.monotonic() - start < 5
