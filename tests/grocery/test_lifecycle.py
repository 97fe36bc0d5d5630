"""Tests for the purchased toggle lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mealsync.events import GROCERY_ITEM_UPDATED
from mealsync.grocery import GroceryItemNotFoundError, ItemLifecycle, toggle_purchased
from mealsync.models.grocery import GroceryItem
from mealsync.models.household import MemberRef

NOW = datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)
ASHA = MemberRef(id=1, name="Asha")
BEN = MemberRef(id=2, name="Ben")


def _item(**overrides):
    data = {"id": "potatoes|kg", "name": "potatoes", "quantity": 2, "unit": "kg", "item_id": 10}
    data.update(overrides)
    return GroceryItem(**data)


class FakeItemStore:
    def __init__(self, items, household_id=7):
        self.items = {item.item_id: item for item in items}
        self.household_id = household_id

    def household_of_item(self, item_id):
        return self.household_id if item_id in self.items else None

    def update_item(self, item_id, mutate):
        self.items[item_id] = mutate(self.items[item_id])
        return self.items[item_id]


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, household_id, event, payload):
        self.events.append((household_id, event, payload))


def test_toggle_purchased_records_actor_and_time():
    bought = toggle_purchased(_item(), ASHA, NOW)

    assert bought.purchased is True
    assert bought.purchased_by == ASHA
    assert bought.purchased_at == NOW
    assert bought.quantity == 2
    assert bought.id == "potatoes|kg"


def test_toggle_purchased_clears_fields_when_unchecking():
    bought = _item(purchased=True, purchased_by=ASHA, purchased_at=NOW)

    unbought = toggle_purchased(bought, BEN, NOW + timedelta(minutes=5))

    assert unbought.purchased is False
    assert unbought.purchased_by is None
    assert unbought.purchased_at is None


def test_double_toggle_restores_original_state():
    original = _item()

    restored = toggle_purchased(toggle_purchased(original, ASHA, NOW), BEN, NOW)

    assert restored == original


def test_lifecycle_toggle_updates_store_and_publishes():
    store = FakeItemStore([_item()])
    publisher = RecordingPublisher()
    lifecycle = ItemLifecycle(store=store, publisher=publisher, clock=lambda: NOW)

    updated = lifecycle.toggle(10, ASHA)

    assert updated.purchased is True
    assert updated.purchased_by == ASHA
    assert store.items[10] == updated
    assert publisher.events == [(7, GROCERY_ITEM_UPDATED, updated)]


def test_lifecycle_second_toggle_clears_purchase():
    store = FakeItemStore([_item()])
    lifecycle = ItemLifecycle(store=store, clock=lambda: NOW)

    lifecycle.toggle(10, ASHA)
    updated = lifecycle.toggle(10, BEN)

    assert updated.purchased is False
    assert updated.purchased_by is None


def test_lifecycle_unknown_item_raises():
    store = FakeItemStore([_item()])
    publisher = RecordingPublisher()
    lifecycle = ItemLifecycle(store=store, publisher=publisher)

    with pytest.raises(GroceryItemNotFoundError) as excinfo:
        lifecycle.toggle(99, ASHA)

    assert excinfo.value.item_id == 99
    assert publisher.events == []
