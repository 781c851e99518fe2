"""End-to-end tests for the items API against in-memory SQLite and cache."""
from __future__ import annotations

import pytest
from sqlalchemy import select

from item_service.core.events import event_registry
from item_service.infra.events.outbox.models import OutboxMessage
from item_service.infra.events.outbox.processor import OutboxProcessor

pytestmark = pytest.mark.integration

ITEMS = "/api/v1/items"


async def _outbox(session_factory) -> list[OutboxMessage]:
    async with session_factory() as session:
        return list((await session.execute(select(OutboxMessage).order_by(OutboxMessage.id))).scalars())


async def _create(client, name: str = "Widget", quantity: int = 3) -> dict:
    response = await client.post(ITEMS, json={"name": name, "quantity": quantity})
    assert response.status_code == 201
    return response.json()


# ──────────────────────────────────────────────────────────────
# Create
# ──────────────────────────────────────────────────────────────


class TestCreateItem:
    """POST /api/v1/items"""

    async def test_create_returns_item_and_location(self, client, session_factory):
        response = await client.post(ITEMS, json={"name": "Widget", "quantity": 3})

        body = response.json()
        assert response.status_code == 201
        assert body["name"] == "Widget"
        assert body["quantity"] == 3
        assert body["updated_at"] is None
        assert response.headers["location"] == f"{ITEMS}/{body['id']}"

        (message,) = await _outbox(session_factory)
        assert message.type == "ItemCreatedV1"
        assert message.processed_at is None
        assert event_registry.decode(message.type, message.content).item_id == body["id"]

    async def test_create_invalidates_cached_pages(self, client, memory_cache):
        await client.get(ITEMS)
        assert "items:page:1:size:10" in memory_cache.store

        await _create(client)

        assert ("delete_pattern", "items:page:*") in memory_cache.calls
        assert "items:page:1:size:10" not in memory_cache.store

        listed = (await client.get(ITEMS)).json()
        assert listed["total_count"] == 1

    @pytest.mark.parametrize(
        ("payload", "field"),
        [
            ({"name": "", "quantity": 1}, "name"),
            ({"name": "   ", "quantity": 1}, "name"),
            ({"name": "x" * 101, "quantity": 1}, "name"),
            ({"name": "Widget", "quantity": -1}, "quantity"),
            ({"quantity": 1}, "name"),
        ],
    )
    async def test_invalid_payload_is_rejected(self, client, session_factory, payload, field):
        response = await client.post(ITEMS, json=payload)

        body = response.json()
        assert response.status_code == 422
        assert body["type"] == "validation-error"
        assert field in {e["field"] for e in body["errors"]}
        assert await _outbox(session_factory) == []


# ──────────────────────────────────────────────────────────────
# Read
# ──────────────────────────────────────────────────────────────


class TestReadItems:
    """GET /api/v1/items and /api/v1/items/{id}"""

    async def test_get_item(self, client):
        created = await _create(client)

        response = await client.get(f"{ITEMS}/{created['id']}")

        body = response.json()
        assert response.status_code == 200
        assert (body["id"], body["name"], body["quantity"]) == (created["id"], "Widget", 3)

    async def test_get_missing_item_is_problem(self, client):
        response = await client.get(f"{ITEMS}/999")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"] == "item-not-found"

    async def test_list_pages(self, client):
        for i in range(3):
            await _create(client, name=f"Item {i}")

        body = (await client.get(ITEMS, params={"page_number": 2, "page_size": 2})).json()

        assert [i["name"] for i in body["items"]] == ["Item 2"]
        assert body["total_count"] == 3
        assert body["total_pages"] == 2
        assert body["has_previous_page"] is True
        assert body["has_next_page"] is False

    async def test_paging_is_normalized(self, client, memory_cache):
        body = (await client.get(ITEMS, params={"page_number": 0, "page_size": 500})).json()

        assert body["page_number"] == 1
        assert body["page_size"] == 100
        assert "items:page:1:size:100" in memory_cache.store

    async def test_list_served_from_cache(self, client, memory_cache):
        await _create(client)
        first = (await client.get(ITEMS)).json()
        memory_cache.store["items:page:1:size:10"]["total_count"] = 42

        second = (await client.get(ITEMS)).json()

        assert first["total_count"] == 1
        assert second["total_count"] == 42


# ──────────────────────────────────────────────────────────────
# Update and delete
# ──────────────────────────────────────────────────────────────


class TestUpdateDeleteItem:
    """PUT and DELETE /api/v1/items/{id}"""

    async def test_update(self, client, session_factory):
        created = await _create(client)

        response = await client.put(f"{ITEMS}/{created['id']}", json={"name": "Gadget", "quantity": 0})

        assert response.status_code == 204
        fetched = (await client.get(f"{ITEMS}/{created['id']}")).json()
        assert fetched["name"] == "Gadget"
        assert fetched["updated_at"] is not None
        assert [m.type for m in await _outbox(session_factory)] == ["ItemCreatedV1", "ItemUpdatedV1"]

    async def test_update_missing_item(self, client, session_factory):
        response = await client.put(f"{ITEMS}/999", json={"name": "Gadget", "quantity": 0})

        assert response.status_code == 404
        assert await _outbox(session_factory) == []

    async def test_update_validation(self, client):
        created = await _create(client)

        response = await client.put(f"{ITEMS}/{created['id']}", json={"name": "Gadget", "quantity": -5})

        assert response.status_code == 422

    async def test_delete(self, client, session_factory):
        created = await _create(client)

        response = await client.delete(f"{ITEMS}/{created['id']}")

        assert response.status_code == 204
        assert (await client.get(f"{ITEMS}/{created['id']}")).status_code == 404
        assert [m.type for m in await _outbox(session_factory)][-1] == "ItemDeletedV1"

    async def test_delete_missing_item(self, client):
        assert (await client.delete(f"{ITEMS}/999")).status_code == 404


# ──────────────────────────────────────────────────────────────
# Outbox delivery
# ──────────────────────────────────────────────────────────────


class TestOutboxDelivery:
    """Events written by the API reach the publisher in order."""

    async def test_processor_publishes_api_events(self, client, session_factory, publisher):
        created = await _create(client)
        await client.put(f"{ITEMS}/{created['id']}", json={"name": "Gadget", "quantity": 1})
        await client.delete(f"{ITEMS}/{created['id']}")

        result = await OutboxProcessor(session_factory, publisher).run_cycle()

        assert result.published == 3
        assert [tag for tag, _ in publisher.published] == ["ItemCreatedV1", "ItemUpdatedV1", "ItemDeletedV1"]
        assert all(m.processed_at is not None for m in await _outbox(session_factory))
