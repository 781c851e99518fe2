"""Modular Pydantic Settings v2 configuration.

One settings class per domain, each read from environment variables with its
own prefix (APP_, DB_, REDIS_, RABBIT_, OUTBOX_, CACHE_, LOG_) and an optional
``.env`` file. Import settings through the cached loaders::

    from item_service.core.settings import get_outbox_settings

    settings = get_outbox_settings()
    print(settings.batch_size)
"""

from __future__ import annotations

from .app import AppSettings
from .cache import CacheSettings
from .database import DatabaseSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_cache_settings,
    get_db_settings,
    get_logging_settings,
    get_outbox_settings,
    get_rabbit_settings,
    get_redis_settings,
)
from .logs import LoggingSettings
from .outbox import OutboxSettings
from .rabbit import RabbitSettings
from .redis import RedisSettings

__all__ = [
    "AppSettings",
    "CacheSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "OutboxSettings",
    "RabbitSettings",
    "RedisSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_cache_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_outbox_settings",
    "get_rabbit_settings",
    "get_redis_settings",
]
