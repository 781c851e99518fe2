"""Main CLI entry point for item-service management commands."""

from __future__ import annotations

import click

from item_service import __version__
from item_service.cli.commands import cache, db, outbox, server
from item_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="item-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Item Service CLI.

    \b
    Command Groups:
      serve      Run the HTTP API (and the outbox processor)
      outbox     Run, inspect, requeue and purge the outbox
      db         Create tables
      cache      Clear cached responses

    \b
    Quick Start:
      item-service db init
      item-service serve
      item-service outbox stats
    """
    ctx.ensure_object(dict)
    setup_logging()


cli.add_command(server.serve)
cli.add_command(outbox.outbox)
cli.add_command(db.db)
cli.add_command(cache.cache)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
