"""Router registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from item_service.features.health import router as health_router
from item_service.features.items import router as items_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from item_service.core.settings import AppSettings


def setup_routers(app: FastAPI, app_settings: AppSettings) -> None:
    """Mount versioned API routes under ``api_prefix`` and probes at the root."""
    app.include_router(items_router, prefix=app_settings.api_prefix)
    app.include_router(health_router)
