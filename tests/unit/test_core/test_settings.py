"""Unit tests for settings classes and loaders."""
from __future__ import annotations

from pydantic import ValidationError
import pytest

from item_service.core.settings import (
    CacheSettings,
    DatabaseSettings,
    LoggingSettings,
    OutboxSettings,
    RedisSettings,
    clear_settings_cache,
    get_outbox_settings,
)


class TestOutboxSettings:
    """Tests for OUTBOX_ settings."""

    def test_defaults(self, monkeypatch):
        for name in ("OUTBOX_BATCH_SIZE", "OUTBOX_POLL_INTERVAL", "OUTBOX_MAX_ATTEMPTS"):
            monkeypatch.delenv(name, raising=False)

        settings = OutboxSettings()

        assert settings.batch_size == 50
        assert settings.poll_interval == 10.0
        assert settings.max_attempts == 10
        assert settings.retention_days == 7

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("OUTBOX_BATCH_SIZE", "5")
        monkeypatch.setenv("OUTBOX_MAX_ATTEMPTS", "0")

        settings = OutboxSettings()

        assert settings.batch_size == 5
        assert settings.max_attempts == 0

    def test_rejects_invalid_batch_size(self, monkeypatch):
        monkeypatch.setenv("OUTBOX_BATCH_SIZE", "0")

        with pytest.raises(ValidationError):
            OutboxSettings()

    def test_settings_are_frozen(self):
        settings = OutboxSettings()

        with pytest.raises(ValidationError):
            settings.batch_size = 1  # type: ignore[misc]

    def test_loader_is_cached_until_cleared(self, monkeypatch):
        """The loader returns one instance until the cache is cleared."""
        clear_settings_cache()
        first = get_outbox_settings()
        assert get_outbox_settings() is first

        monkeypatch.setenv("OUTBOX_BATCH_SIZE", "7")
        clear_settings_cache()
        try:
            assert get_outbox_settings().batch_size == 7
        finally:
            monkeypatch.delenv("OUTBOX_BATCH_SIZE")
            clear_settings_cache()


class TestCacheSettings:
    def test_items_ttl_defaults_to_five_minutes(self, monkeypatch):
        monkeypatch.delenv("CACHE_ITEMS_TTL", raising=False)

        assert CacheSettings().items_ttl == 300


class TestDatabaseSettings:
    """Tests for DB_ settings."""

    def test_disabled_uses_sqlite(self, monkeypatch):
        monkeypatch.setenv("DB_ENABLED", "false")
        monkeypatch.setenv("DB_SQLITE_PATH", "test.db")

        settings = DatabaseSettings()

        assert settings.url == "sqlite+aiosqlite:///test.db"
        assert settings.is_sqlite
        assert "pool_size" not in settings.engine_kwargs()

    def test_postgres_url_from_components(self, monkeypatch):
        monkeypatch.setenv("DB_ENABLED", "true")
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DB_HOST", "db.internal")
        monkeypatch.setenv("DB_NAME", "inventory")

        settings = DatabaseSettings()

        assert settings.url.startswith("postgresql+psycopg://")
        assert settings.url.endswith("@db.internal:5432/inventory")
        assert settings.engine_kwargs()["pool_size"] == settings.pool_size

    def test_database_url_overrides_components(self, monkeypatch):
        monkeypatch.setenv("DB_ENABLED", "true")
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://u:p@h:1/d")

        assert DatabaseSettings().url == "postgresql+psycopg://u:p@h:1/d"


class TestRedisSettings:
    def test_url_includes_password(self, monkeypatch):
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.setenv("REDIS_PASSWORD", "secret")

        assert RedisSettings().url == "redis://:secret@localhost:6379/0"

    def test_key_prefix(self, monkeypatch):
        monkeypatch.setenv("REDIS_KEY_PREFIX", "svc:")

        assert RedisSettings().get_prefixed_key("items:page:*") == "svc:items:page:*"

    def test_pool_decodes_responses(self):
        assert RedisSettings().connection_pool_kwargs()["decode_responses"] is True


class TestLoggingSettings:
    def test_json_flag_reads_log_json(self, monkeypatch):
        monkeypatch.setenv("LOG_JSON", "true")

        assert LoggingSettings().json_logs is True
