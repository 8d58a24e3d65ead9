"""``cfs init`` — create the sandbox, downloads and log directories."""

from __future__ import annotations

import sys

import click

from cfs.cli_commands._output import config_option, console, err_console, load_or_exit


@click.command()
@config_option
def init(config_path: str | None) -> None:
    """Create any missing base directory named in the settings.

    The service itself never creates these; run this once before ``cfs serve``.
    """
    settings = load_or_exit(config_path)

    failed = False
    for label, path in settings.base_dirs().items():
        if path.is_dir():
            console.print(f"  {label}: [dim]exists[/dim] {path}")
            continue
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            err_console.print(f"[red]Cannot create {label} directory {path}:[/red] {exc}")
            failed = True
            continue
        console.print(f"  {label}: [green]created[/green] {path}")

    if failed:
        sys.exit(1)
