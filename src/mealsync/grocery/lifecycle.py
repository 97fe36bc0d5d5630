"""Purchased/unpurchased transitions for generated grocery items."""

from __future__ import annotations

import logging
from datetime import datetime

from mealsync import metrics
from mealsync.events import GROCERY_ITEM_UPDATED, HouseholdEventPublisher, NullEventPublisher
from mealsync.models.grocery import GroceryItem
from mealsync.models.household import MemberRef

from .assembler import Clock, utcnow
from .ports import GroceryItemStore

logger = logging.getLogger(__name__)


class GroceryItemNotFoundError(ValueError):
    """Raised when toggling an item that does not exist."""

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Grocery item {item_id} not found")
        self.item_id = item_id


def toggle_purchased(item: GroceryItem, actor: MemberRef, now: datetime) -> GroceryItem:
    """Flip the purchased flag, recording or clearing who bought it and when."""

    if item.purchased:
        return item.model_copy(
            update={"purchased": False, "purchased_by": None, "purchased_at": None}
        )
    return item.model_copy(update={"purchased": True, "purchased_by": actor, "purchased_at": now})


class ItemLifecycle:
    """Apply purchase toggles through the store and notify the household."""

    def __init__(
        self,
        *,
        store: GroceryItemStore,
        publisher: HouseholdEventPublisher | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._publisher = publisher or NullEventPublisher()
        self._clock = clock

    def toggle(self, item_id: int, actor: MemberRef) -> GroceryItem:
        household_id = self._store.household_of_item(item_id)
        if household_id is None:
            raise GroceryItemNotFoundError(item_id)

        now = self._clock()
        updated = self._store.update_item(item_id, lambda item: toggle_purchased(item, actor, now))

        direction = "purchased" if updated.purchased else "unpurchased"
        metrics.GROCERY_TOGGLES.labels(direction=direction).inc()
        logger.info(
            "Grocery item %s marked %s by member %s",
            item_id,
            direction,
            actor.id,
            extra={"household_id": household_id, "member_id": actor.id},
        )

        self._publisher.publish(household_id, GROCERY_ITEM_UPDATED, updated)
        return updated


__all__ = ["GroceryItemNotFoundError", "ItemLifecycle", "toggle_purchased"]
