"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from cfs.cli_commands.config import config_cmd
    from cfs.cli_commands.init import init
    from cfs.cli_commands.ops import download, exec_cmd, tail
    from cfs.cli_commands.serve import serve

    cli.add_command(serve)
    cli.add_command(init)
    cli.add_command(exec_cmd)
    cli.add_command(download)
    cli.add_command(tail)
    cli.add_command(config_cmd)
