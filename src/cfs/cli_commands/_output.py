"""Shared CLI helpers: console, settings loading and formatters."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from cfs.config.models import ServiceSettings  # noqa: TC001

console = Console()
err_console = Console(stderr=True)

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings YAML file (defaults apply when omitted).",
)


def load_or_exit(config_path: str | None) -> ServiceSettings:
    """Load settings or print the error and exit with status 2."""
    from cfs.config.loader import load_settings
    from cfs.errors import SettingsError

    try:
        return load_settings(Path(config_path) if config_path else None)
    except SettingsError as exc:
        err_console.print(f"[red]Settings error:[/red] {exc}")
        sys.exit(2)


def print_settings(settings: ServiceSettings, *, as_json: bool = False) -> None:
    """Pretty-print the effective settings, masking the password."""
    if as_json:
        data = settings.model_dump(mode="json")
        data["auth"]["password"] = "***"
        console.print_json(data=data)
        return

    table = Table(title="Effective Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("sandbox.base_dir", str(settings.sandbox.base_dir))
    table.add_row("sandbox.timeout", f"{settings.sandbox.timeout}s")
    table.add_row("sandbox.shell", settings.sandbox.shell)
    table.add_row("download.base_dir", str(settings.download.base_dir))
    table.add_row("download.timeout", _seconds(settings.download.timeout))
    table.add_row("logs.base_dir", str(settings.logs.base_dir))
    table.add_row("logs.default_file", settings.logs.default_file)
    table.add_row("logs.default_lines", str(settings.logs.default_lines))
    table.add_row("auth.enabled", str(settings.auth.enabled))
    table.add_row("auth.username", settings.auth.username)
    table.add_row("server", f"{settings.server.host}:{settings.server.port}{settings.server.prefix}")
    table.add_row("telemetry.enabled", str(settings.telemetry.enabled))

    console.print(table)


def _seconds(value: float | None) -> str:
    return "unbounded" if value is None else f"{value}s"
