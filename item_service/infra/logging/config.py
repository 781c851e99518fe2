"""Logging configuration.

Uses ``logging.config.dictConfig`` for the root logger and a
QueueHandler + QueueListener pair so handlers doing I/O never block the event
loop. Application modules just call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from item_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from item_service.core.settings import LoggingSettings

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False


def setup_logging(log_settings: LoggingSettings | None = None, *, force: bool = False) -> None:
    """Configure logging once per process.

    Args:
        log_settings: Logging settings; loaded from LOG_ variables if omitted.
        force: Reconfigure even if logging was already set up.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from item_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**log_settings.to_logging_kwargs())
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    capture_warnings: bool = True,
    service_name: str = "item-service",
) -> None:
    """Configure the root logger with a queue-backed handler set.

    Args:
        log_level: Root logger level.
        json_logs: Emit JSON Lines instead of text.
        console_enabled: Log to stderr.
        file_path: Rotating log file, or None to disable file logging.
        file_max_bytes: Size at which the log file rotates.
        file_backup_count: Rotated files to keep.
        capture_warnings: Route ``warnings`` through logging.
        service_name: Static ``service`` field in JSON records.
    """
    global _listener

    shutdown()
    logging.captureWarnings(capture_warnings)

    formatter: logging.Formatter
    if json_logs:
        formatter = JSONFormatter(static={"service": service_name})
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handlers: list[logging.Handler] = []
    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
            "loggers": {
                # uvicorn installs its own handlers; route them through root
                "uvicorn": {"handlers": [], "propagate": True},
                "uvicorn.error": {"handlers": [], "propagate": True},
                "uvicorn.access": {"handlers": [], "propagate": True},
            },
        }
    )

    if not handlers:
        return

    log_queue: Queue[logging.LogRecord] = Queue()
    _listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    logging.getLogger().addHandler(QueueHandler(log_queue))
    logger.debug("Logging configured", extra={"level": log_level, "json": json_logs})


def shutdown() -> None:
    """Stop the queue listener, flushing queued records."""
    global _listener

    if _listener is not None:
        _listener.stop()
        _listener = None


def logging_config_for_uvicorn() -> dict[str, Any]:
    """dictConfig that leaves uvicorn's loggers to propagate to our root handler."""
    return {"version": 1, "disable_existing_loggers": False}
