"""``fetchtime serve``: run the HTTP and WebSocket server."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from fetchtime.cli_commands._output import console


@click.command()
@click.option("--host", default=None, help="Bind address (default: localhost).")
@click.option("--port", "-p", type=int, default=None, help="Bind port (default: 3000).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file.",
)
@click.option("--no-websocket", is_flag=True, help="Do not mount the WebSocket endpoint.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level (default: INFO).",
)
def serve(
    host: str | None,
    port: int | None,
    config_path: str | None,
    no_websocket: bool,
    log_level: str | None,
) -> None:
    """Serve tools over HTTP at /mcp and WebSocket at /mcp/ws."""
    import uvicorn

    from fetchtime.server.bootstrap import build_registry
    from fetchtime.server.config import load_config
    from fetchtime.server.errors import ConfigError
    from fetchtime.server.http import create_app
    from fetchtime.utils.logging import configure_logging

    try:
        config = load_config(
            Path(config_path) if config_path else None,
            host=host,
            port=port,
            enable_websocket=False if no_websocket else None,
            log_level=log_level,
        )
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    configure_logging(config.log_level)
    if config.telemetry_enabled:
        from fetchtime.utils.telemetry import configure_telemetry

        configure_telemetry(otlp_endpoint=config.otlp_endpoint)

    app = create_app(config, build_registry())
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
