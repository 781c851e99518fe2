"""Unit tests for the exception hierarchy."""
from __future__ import annotations

from item_service.core.exceptions import (
    AppException,
    CacheError,
    NotFoundException,
    PublishError,
    SerializationError,
    TransactionError,
)


class TestAppExceptions:
    """HTTP-facing errors carry their problem-details fields."""

    def test_default_title_from_status(self):
        exc = AppException(status_code=409, detail="conflict")

        assert exc.title == "Conflict"
        assert exc.type == "about:blank"
        assert str(exc) == "conflict"

    def test_not_found(self):
        exc = NotFoundException("Item 1 not found", type="item-not-found", extra={"item_id": 1})

        assert exc.status_code == 404
        assert exc.type == "item-not-found"
        assert exc.extra == {"item_id": 1}

    def test_transaction_error_is_service_unavailable(self):
        exc = TransactionError(operation="commit")

        assert exc.status_code == 503
        assert exc.type == "transaction-failed"
        assert exc.extra == {"operation": "commit"}

    def test_serialization_error(self):
        exc = SerializationError("cannot encode", event_type="ItemCreatedV1")

        assert exc.status_code == 500
        assert exc.event_type == "ItemCreatedV1"


class TestInfrastructureErrors:
    """Publish and cache errors never reach clients."""

    def test_publish_error_is_not_app_exception(self):
        exc = PublishError("broker down", event_type="ItemCreatedV1")

        assert not isinstance(exc, AppException)
        assert exc.event_type == "ItemCreatedV1"

    def test_cache_error_keeps_key(self):
        exc = CacheError("redis down", key="items:page:1:size:10")

        assert not isinstance(exc, AppException)
        assert exc.key == "items:page:1:size:10"
