"""Root logger setup shared by the CLI entry points."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: str | int = "INFO", stream: TextIO | None = None) -> None:
    """Route all log records through a rich handler writing to *stream*.

    *stream* defaults to stderr; stdout is reserved for protocol traffic on
    the stdio transport.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    console = Console(file=stream or sys.stderr)
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
