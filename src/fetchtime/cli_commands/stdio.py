"""``fetchtime stdio``: serve tools over stdin/stdout."""

from __future__ import annotations

import click


@click.command()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Log level; logs always go to stderr.",
)
def stdio(log_level: str) -> None:
    """Read JSON-RPC requests from stdin, one per line."""
    from fetchtime.server.bootstrap import build_registry
    from fetchtime.server.stdio import StdioServer
    from fetchtime.utils.logging import configure_logging

    configure_logging(log_level)
    StdioServer(build_registry()).serve()
