"""Database management commands."""

from __future__ import annotations

import asyncio
import sys

import click


@click.group()
def db() -> None:
    """Database management commands."""


@db.command()
def init() -> None:
    """Create the items and outbox tables if they do not exist."""
    from item_service.infra.database import close_database, init_database

    click.echo("Initializing database...")

    async def _init() -> None:
        try:
            await init_database()
        finally:
            await close_database()

    try:
        asyncio.run(_init())
    except Exception as e:
        click.echo(f"❌ Failed to initialize database: {e}", err=True)
        sys.exit(1)
    click.echo("✓ Database tables created successfully")
