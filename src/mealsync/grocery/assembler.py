"""Build grocery lists from the meals scheduled in a date range."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Mapping, Optional

from mealsync import metrics
from mealsync.events import GROCERY_LIST_CREATED, HouseholdEventPublisher, NullEventPublisher
from mealsync.models.grocery import GroceryItem, GroceryList

from .consolidator import parse_ingredients
from .normalizer import join_blocks
from .ports import GroceryListStore, IngredientCatalog, MealSource

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def consolidate_texts(texts: Iterable[Optional[str]]) -> List[GroceryItem]:
    """Consolidate several ingredient blocks as one list."""

    return parse_ingredients(join_blocks(texts))


def week_plan_items(week_plan: Mapping[str, Iterable[Optional[str]]]) -> List[GroceryItem]:
    """Consolidate a day -> ingredient blocks mapping into one item list."""

    return consolidate_texts(block for blocks in week_plan.values() for block in blocks)


class GroceryListAssembler:
    """Drive the consolidation engine over a household's meals and persist the result.

    Every call to :meth:`generate` creates a new list, even when a list for an
    overlapping range already exists.
    """

    def __init__(
        self,
        *,
        meals: MealSource,
        catalog: IngredientCatalog,
        lists: GroceryListStore,
        publisher: HouseholdEventPublisher | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._meals = meals
        self._catalog = catalog
        self._lists = lists
        self._publisher = publisher or NullEventPublisher()
        self._clock = clock

    def generate(self, household_id: int, start: date, end: date) -> GroceryList:
        if start > end:
            raise ValueError(f"Date range start {start} is after end {end}")

        meals = [meal for meal in self._meals.meals_in_range(household_id, start, end) if meal.ingredients]
        items = consolidate_texts(meal.ingredients for meal in meals)

        resolved = [
            item.model_copy(
                update={"ingredient_id": self._catalog.find_or_create(item.name.lower(), item.unit)}
            )
            for item in items
        ]

        grocery_list = self._lists.create_list(
            household_id=household_id,
            date_range_start=start,
            date_range_end=end,
            items=resolved,
            created_at=self._clock(),
        )

        metrics.GROCERY_LISTS_GENERATED.inc()
        metrics.GROCERY_ITEMS_CONSOLIDATED.inc(len(grocery_list.items))
        logger.info(
            "Generated grocery list %s from %s meal(s) with %s item(s) for %s..%s",
            grocery_list.id,
            len(meals),
            len(grocery_list.items),
            start,
            end,
            extra={"household_id": household_id, "grocery_list_id": grocery_list.id},
        )

        self._publisher.publish(household_id, GROCERY_LIST_CREATED, grocery_list)
        return grocery_list


__all__ = ["Clock", "GroceryListAssembler", "consolidate_texts", "utcnow", "week_plan_items"]
