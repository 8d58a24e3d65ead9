"""cfs CLI entrypoint."""

from __future__ import annotations

import click

from cfs import __version__


@click.group()
@click.version_option(version=__version__, prog_name="cfs")
def main() -> None:
    """cfs — sandboxed commands, confined downloads and log tails.

    Use ``serve`` to run the HTTP service, ``init`` to create its directories,
    and ``exec``, ``download`` or ``tail`` to run one operation locally.
    """


# Register subcommands
from cfs.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
