"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from item_service.app.exception_handlers import configure_exception_handlers
from item_service.app.lifespan import lifespan
from item_service.app.middleware import configure_middleware
from item_service.app.router import setup_routers
from item_service.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
