"""CommandRunner — runs shell commands inside the sandbox directory.

The sandbox directory is only a working directory. Commands run with the
service's own privileges; the character denylist in :data:`BLOCKED_SEQUENCES`
is advisory and does not stop ``$()``, redirections or newlines. Real
isolation needs OS-level sandboxing (namespaces, containers, seccomp).
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
from typing import TYPE_CHECKING

from cfs.core.models import CommandResult
from cfs.errors import (
    CommandTimeoutError,
    ConfigurationError,
    ExecutionError,
    InvalidInputError,
)
from cfs.utils.telemetry import (
    ATTR_EXIT_CODE,
    ATTR_SANDBOX_DIR,
    ATTR_TIMED_OUT,
    ATTR_TIMEOUT,
    get_tracer,
    operation_span,
)

if TYPE_CHECKING:
    from cfs.config.models import SandboxConfig

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

BLOCKED_SEQUENCES: tuple[str, ...] = ("..", ";", "&&", "||", "|", "`")

_READ_CHUNK = 64 * 1024


def validate_command(command: str | None) -> str:
    """Return *command* if it passes the emptiness and denylist checks.

    Raises:
        InvalidInputError: If the command is blank or contains a blocked sequence.
    """
    if command is None or not command.strip():
        raise InvalidInputError("Command cannot be empty.")
    if any(seq in command for seq in BLOCKED_SEQUENCES):
        raise InvalidInputError("Invalid characters in command. Execution restricted.")
    return command


class CommandRunner:
    """Spawn ``<shell> -c <command>`` in the sandbox directory.

    Each call starts an independent process in its own process group; calls
    are not serialized, so concurrent commands may race on files in the
    sandbox. On timeout the whole group is killed with ``SIGKILL`` and the
    output gathered so far is dropped.
    """

    def __init__(self, config: SandboxConfig) -> None:
        self._config = config

    @property
    def config(self) -> SandboxConfig:
        return self._config

    async def execute(self, command: str | None, *, timeout: float | None = None) -> CommandResult:
        """Validate and run *command*, returning its exit code and merged output.

        Raises:
            InvalidInputError: Blank command, blocked character sequence or non-positive timeout.
            ConfigurationError: The sandbox directory is missing.
            CommandTimeoutError: The command outlived *timeout* (default from config).
            ExecutionError: The process could not be spawned or read.
        """
        try:
            command = validate_command(command)
        except InvalidInputError:
            logger.warning("Rejected command %r", command)
            raise

        sandbox_dir = self._config.base_dir
        if not sandbox_dir.is_dir():
            logger.error("Sandbox directory '%s' does not exist or is not a directory.", sandbox_dir)
            raise ConfigurationError(
                str(sandbox_dir),
                "Sandbox directory misconfiguration. Please contact administrator.",
            )

        limit = timeout if timeout is not None else self._config.timeout
        if limit <= 0:
            raise InvalidInputError(f"Command timeout must be positive, got {limit}.")

        attributes = {ATTR_SANDBOX_DIR: str(sandbox_dir), ATTR_TIMEOUT: limit}
        with operation_span(_tracer, "cfs.execute", attributes) as span:
            logger.info("Executing command in %s: %s", sandbox_dir, command)
            try:
                proc = await asyncio.create_subprocess_exec(
                    self._config.shell,
                    "-c",
                    command,
                    cwd=sandbox_dir,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                    start_new_session=True,
                )
            except OSError as exc:
                logger.error("Failed to spawn command %r: %s", command, exc)
                raise ExecutionError(f"Error executing command: {exc}") from exc

            try:
                output = await asyncio.wait_for(self._collect(proc), timeout=limit)
            except TimeoutError:
                await self._kill(proc)
                span.set_attribute(ATTR_TIMED_OUT, True)
                logger.warning("Command timed out after %ss: %s", limit, command)
                raise CommandTimeoutError(limit) from None
            except asyncio.CancelledError:
                await self._kill(proc)
                raise
            except OSError as exc:
                await self._kill(proc)
                raise ExecutionError(f"Error executing command: {exc}") from exc

            exit_code = proc.returncode if proc.returncode is not None else -1
            span.set_attribute(ATTR_EXIT_CODE, exit_code)

        if exit_code != 0:
            logger.info("Command exited with code %d: %s", exit_code, command)
        return CommandResult(exit_code=exit_code, output=output)

    @staticmethod
    async def _collect(proc: asyncio.subprocess.Process) -> str:
        """Read merged output line by line until EOF, then reap the process.

        Every line, including an unterminated last one, ends with ``os.linesep``.
        """
        assert proc.stdout is not None
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        lines: list[str] = []
        pending = ""
        while chunk := await proc.stdout.read(_READ_CHUNK):
            pending += decoder.decode(chunk)
            *complete, pending = pending.split("\n")
            lines.extend(complete)
        pending += decoder.decode(b"", final=True)
        if pending:
            lines.append(pending)
        await proc.wait()
        return "".join(line.removesuffix("\r") + os.linesep for line in lines)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        """SIGKILL the process group of *proc* and reap the shell.

        The group is signalled even if the shell already exited, since
        background children may still hold the output pipe open.
        """
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        await proc.wait()
