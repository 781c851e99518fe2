"""Structured logging setup.

Usage:
    from item_service.infra.logging import setup_logging
    import logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Item created", extra={"item_id": 42})
"""

from __future__ import annotations

from .config import configure_logging, setup_logging, shutdown
from .formatters import JSONFormatter

__all__ = ["JSONFormatter", "configure_logging", "setup_logging", "shutdown"]
