"""``cfs config`` — show the effective settings."""

from __future__ import annotations

import click

from cfs.cli_commands._output import config_option, load_or_exit, print_settings


@click.command("config")
@config_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def config_cmd(config_path: str | None, as_json: bool) -> None:
    """Print the settings the service would run with."""
    settings = load_or_exit(config_path)
    print_settings(settings, as_json=as_json)
