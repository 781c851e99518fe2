"""Server commands."""

from __future__ import annotations

import click


@click.command()
@click.option("--host", default=None, help="Bind address (defaults to APP_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (defaults to APP_PORT).")
@click.option("--reload/--no-reload", default=None, help="Auto-reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Run the API with uvicorn. The outbox processor runs inside it."""
    import uvicorn

    from item_service.core.settings import get_app_settings, get_logging_settings
    from item_service.infra.logging.config import logging_config_for_uvicorn

    settings = get_app_settings()
    uvicorn.run(
        "item_service.app.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.reload if reload is None else reload,
        log_config=logging_config_for_uvicorn(),
        log_level=get_logging_settings().level.lower(),
    )
