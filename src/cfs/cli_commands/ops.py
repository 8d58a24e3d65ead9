"""``cfs exec`` / ``cfs download`` / ``cfs tail`` — run one operation locally.

These bypass the HTTP layer (and its authorization) and call the core
components directly with the same settings ``cfs serve`` would use.
"""

from __future__ import annotations

import asyncio
import sys

import click

from cfs.cli_commands._output import config_option, console, err_console, load_or_exit
from cfs.errors import CommandTimeoutError, ServiceError

_TIMEOUT_EXIT_CODE = 124


@click.command("exec")
@click.argument("command")
@config_option
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Override the command timeout (seconds).",
)
def exec_cmd(command: str, config_path: str | None, timeout: float | None) -> None:
    """Run COMMAND in the sandbox directory and print its output."""
    from cfs.core.runner import CommandRunner

    settings = load_or_exit(config_path)
    runner = CommandRunner(settings.sandbox)

    try:
        result = asyncio.run(runner.execute(command, timeout=timeout))
    except CommandTimeoutError as exc:
        err_console.print(f"[red]Timeout:[/red] {exc}")
        sys.exit(_TIMEOUT_EXIT_CODE)
    except ServiceError as exc:
        err_console.print(f"[red]Execution error:[/red] {exc}")
        sys.exit(1)

    click.echo(result.output, nl=False)
    if not result.ok:
        err_console.print(f"[yellow]Command failed with exit code {result.exit_code}[/yellow]")
        sys.exit(result.exit_code)


@click.command()
@click.argument("url")
@click.argument("destination")
@config_option
def download(url: str, destination: str, config_path: str | None) -> None:
    """Download URL to DESTINATION inside the downloads directory."""
    from cfs.core.downloader import Downloader

    settings = load_or_exit(config_path)
    downloader = Downloader(settings.download)

    try:
        path = asyncio.run(downloader.download(url, destination))
    except ServiceError as exc:
        err_console.print(f"[red]Download error:[/red] {exc}")
        sys.exit(1)

    console.print(f"[green]File downloaded successfully to:[/green] {path}")


@click.command()
@click.argument("file", required=False)
@click.option("--lines", "-n", type=int, default=None, help="Trailing lines to print (default 500).")
@config_option
def tail(file: str | None, lines: int | None, config_path: str | None) -> None:
    """Print the last lines of FILE (default: the default log file)."""
    from cfs.core.logs import LogReader

    settings = load_or_exit(config_path)
    reader = LogReader(settings.logs)

    try:
        text = reader.tail(file if file is not None else settings.logs.default_file, lines)
    except ServiceError as exc:
        err_console.print(f"[red]Log error:[/red] {exc}")
        sys.exit(1)

    click.echo(text)
