"""Health, readiness and metrics endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from item_service.core.dependencies import get_db_session
from item_service.core.settings import get_app_settings, get_outbox_settings
from item_service.infra.database import check_database
from item_service.infra.events.outbox.repository import OutboxRepository

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": get_app_settings().service_name}


@router.get("/health/ready", summary="Readiness probe")
async def ready(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    """Report store, cache and outbox state.

    Returns 503 when the primary store is unreachable. A missing cache or
    broker only degrades the service.
    """
    checks: dict[str, Any] = {}

    database_ok = await check_database()
    checks["database"] = "ok" if database_ok else "unavailable"

    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        checks["cache"] = "disabled"
    else:
        checks["cache"] = "ok" if await cache.health_check() else "unavailable"

    publisher = getattr(request.app.state, "publisher", None)
    if publisher is None:
        checks["broker"] = "disabled"
    else:
        checks["broker"] = "ok" if publisher.is_connected else "unavailable"

    processor = getattr(request.app.state, "outbox_processor", None)
    outbox: dict[str, Any] = {
        "processor": processor.state.value if processor is not None else "disabled",
    }
    if database_ok:
        repo = OutboxRepository()
        outbox["pending"] = await repo.count_pending(session)
        outbox["parked"] = await repo.count_parked(
            session, max_attempts=get_outbox_settings().max_attempts
        )
    checks["outbox"] = outbox

    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        overall = "unavailable"
    elif "unavailable" in (checks["cache"], checks["broker"]) or processor is None:
        overall = "degraded"
    else:
        overall = "ok"
    return {"status": overall, "checks": checks}


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
