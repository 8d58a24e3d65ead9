"""``cfs serve`` — run the HTTP service under uvicorn."""

from __future__ import annotations

import logging
import sys

import click

from cfs.cli_commands._output import config_option, err_console, load_or_exit


@click.command()
@config_option
@click.option("--host", default=None, help="Bind address (overrides settings).")
@click.option("--port", type=int, default=None, help="Bind port (overrides settings).")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="info",
    help="Logging level.",
)
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
def serve(
    config_path: str | None,
    host: str | None,
    port: int | None,
    log_level: str,
    telemetry: bool,
) -> None:
    """Serve the execute, download and logs endpoints."""
    import uvicorn

    from cfs.api.app import create_app

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = load_or_exit(config_path)

    if telemetry or settings.telemetry.enabled:
        from cfs.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(otlp_endpoint=settings.telemetry.otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.server.host,
        port=port if port is not None else settings.server.port,
        log_level=log_level,
    )
