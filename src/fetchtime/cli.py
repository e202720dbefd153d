"""FetchTime CLI entrypoint."""

from __future__ import annotations

import click

from fetchtime import __version__


@click.group()
@click.version_option(version=__version__, prog_name="fetchtime")
def main() -> None:
    """FetchTime: a JSON-RPC tool server for time, calendar and astronomy queries."""


# Register subcommands
from fetchtime.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
