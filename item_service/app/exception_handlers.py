"""Global exception handlers producing RFC 7807 Problem Details."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from item_service.core.exceptions import AppException
from item_service.core.schemas.error import (
    ProblemDetail,
    ValidationError,
    ValidationProblemDetail,
)
from item_service.infra.metrics.prometheus import errors_total

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _problem_response(
    status_code: int,
    problem: ProblemDetail,
    request: Request,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    data = problem.model_dump(exclude_none=True)
    if extra:
        data.update(extra)
    request_id = _get_request_id(request)
    if request_id:
        data["request_id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(data),
        media_type=PROBLEM_JSON,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert an :class:`AppException` into a problem response.

    Client errors are logged as warnings, server errors with a traceback.
    """
    errors_total.labels(error_type=exc.type, status_code=exc.status_code).inc()

    log_extra = {
        "request_id": _get_request_id(request),
        "path": request.url.path,
        "method": request.method,
        "exception_type": exc.type,
        "status_code": exc.status_code,
        "detail": exc.detail,
    }
    if exc.status_code >= 500:
        logger.error("Application error", extra=log_extra, exc_info=exc)
    else:
        logger.warning("Application exception occurred", extra=log_extra)

    problem = ProblemDetail(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or request.url.path,
    )
    return _problem_response(exc.status_code, problem, request, extra=exc.extra)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures with one entry per field."""
    validation_errors = [
        ValidationError(
            field=".".join(str(loc) for loc in error["loc"] if loc != "body"),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]
    errors_total.labels(error_type="validation-error", status_code=422).inc()

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=request.url.path,
        errors=validation_errors,
    )
    return _problem_response(status.HTTP_422_UNPROCESSABLE_ENTITY, problem, request)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback and return an opaque 500."""
    errors_total.labels(error_type="internal-error", status_code=500).inc()

    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )

    problem = ProblemDetail(
        type="internal-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=request.url.path,
    )
    return _problem_response(status.HTTP_500_INTERNAL_SERVER_ERROR, problem, request)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the problem-details handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
