"""Household event fan-out for real-time updates.

Mutations that other household members should see (toggling a grocery item,
generating a list, editing the meal calendar) are published through a
:class:`HouseholdEventPublisher` handed to the component that performs them.
The FastAPI app wires a :class:`HouseholdBroadcaster`, which relays events to
WebSocket subscribers of the same household.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Dict, List, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

GROCERY_LIST_CREATED = "grocery-list-created"
GROCERY_LIST_DELETED = "grocery-list-deleted"
GROCERY_ITEM_UPDATED = "grocery-item-updated"
MEAL_CREATED = "meal-created"
MEAL_UPDATED = "meal-updated"
MEAL_DELETED = "meal-deleted"


class HouseholdEventPublisher(Protocol):
    """Capability to notify the members of a household about a change."""

    def publish(self, household_id: int, event: str, payload: Any) -> None:
        """Deliver ``event`` with ``payload`` to everyone watching ``household_id``."""


class NullEventPublisher:
    """Publisher that drops every event (CLI and offline use)."""

    def publish(self, household_id: int, event: str, payload: Any) -> None:
        logger.debug("Dropping household event %s for household %s", event, household_id)


def build_message(household_id: int, event: str, payload: Any) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode="json")
    else:
        data = payload
    return {"event": event, "household_id": household_id, "data": data}


class Subscription:
    """Queue of messages for a single WebSocket connection."""

    def __init__(self, household_id: int, loop: asyncio.AbstractEventLoop) -> None:
        self.household_id = household_id
        self._loop = loop
        self._queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()

    def deliver(self, message: Dict[str, Any]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, message)
        except RuntimeError:
            logger.debug("Subscriber loop closed; dropping %s", message.get("event"))

    async def get(self) -> Dict[str, Any]:
        return await self._queue.get()


class HouseholdBroadcaster:
    """In-process publisher relaying events to per-household subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[int, List[Subscription]] = {}

    def subscribe(self, household_id: int) -> Subscription:
        """Register a subscriber bound to the running event loop."""

        subscription = Subscription(household_id, asyncio.get_running_loop())
        with self._lock:
            self._subscribers.setdefault(household_id, []).append(subscription)
        logger.debug("Subscriber joined household %s", household_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.household_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscribers.pop(subscription.household_id, None)
        logger.debug("Subscriber left household %s", subscription.household_id)

    def subscriber_count(self, household_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(household_id, []))

    def publish(self, household_id: int, event: str, payload: Any) -> None:
        message = build_message(household_id, event, payload)
        with self._lock:
            targets = list(self._subscribers.get(household_id, []))
        for subscription in targets:
            subscription.deliver(message)
        logger.debug(
            "Published %s to %s subscriber(s)",
            event,
            len(targets),
            extra={"household_id": household_id},
        )


__all__ = [
    "GROCERY_ITEM_UPDATED",
    "GROCERY_LIST_CREATED",
    "GROCERY_LIST_DELETED",
    "MEAL_CREATED",
    "MEAL_DELETED",
    "MEAL_UPDATED",
    "HouseholdBroadcaster",
    "HouseholdEventPublisher",
    "NullEventPublisher",
    "Subscription",
    "build_message",
]
