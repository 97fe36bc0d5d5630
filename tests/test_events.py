"""Tests for household event fan-out."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from mealsync.events import (
    GROCERY_ITEM_UPDATED,
    HouseholdBroadcaster,
    NullEventPublisher,
    build_message,
)
from mealsync.models.grocery import GroceryItem
from mealsync.models.household import MemberRef


def test_build_message_serializes_models():
    item = GroceryItem(
        id="salt",
        name="salt",
        quantity=1,
        purchased=True,
        purchased_by=MemberRef(id=2, name="Ben"),
        purchased_at=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        item_id=5,
    )

    message = build_message(4, GROCERY_ITEM_UPDATED, item)

    assert message["event"] == "grocery-item-updated"
    assert message["household_id"] == 4
    assert message["data"]["purchased_by"] == {"id": 2, "name": "Ben"}
    assert message["data"]["purchased_at"].startswith("2025-03-01T12:00:00")


def test_build_message_passes_plain_payloads():
    assert build_message(1, "meal-deleted", {"id": 9})["data"] == {"id": 9}


def test_broadcaster_delivers_only_to_same_household():
    async def scenario():
        broadcaster = HouseholdBroadcaster()
        ours = broadcaster.subscribe(1)
        theirs = broadcaster.subscribe(2)

        broadcaster.publish(1, "meal-created", {"id": 1})

        message = await asyncio.wait_for(ours.get(), timeout=1)
        await asyncio.sleep(0)
        return broadcaster, ours, theirs, message

    broadcaster, ours, theirs, message = asyncio.run(scenario())

    assert message == {"event": "meal-created", "household_id": 1, "data": {"id": 1}}
    assert theirs._queue.empty()
    assert broadcaster.subscriber_count(1) == 1

    broadcaster.unsubscribe(ours)
    broadcaster.unsubscribe(theirs)
    assert broadcaster.subscriber_count(1) == 0
    assert broadcaster.subscriber_count(2) == 0


def test_publish_without_subscribers_is_noop():
    HouseholdBroadcaster().publish(1, "meal-created", {"id": 1})
    NullEventPublisher().publish(1, "meal-created", {"id": 1})
