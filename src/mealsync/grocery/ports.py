"""Collaborator interfaces consumed by the grocery list assembler and lifecycle."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence

from mealsync.models.grocery import GroceryItem, GroceryList
from mealsync.models.meal import Meal


class MealSource(Protocol):
    """Provides the meals feeding a grocery list."""

    def meals_in_range(self, household_id: int, start: date, end: date) -> Sequence[Meal]:
        """Return household meals dated within ``[start, end]`` inclusive."""


class IngredientCatalog(Protocol):
    """Ingredient catalog supporting atomic find-or-create by name."""

    def find_or_create(self, name: str, unit: Optional[str] = None) -> int:
        """Return the catalog id for ``name``, creating the entry when missing."""


class GroceryListStore(Protocol):
    """Persists generated grocery lists together with their items."""

    def create_list(
        self,
        *,
        household_id: int,
        date_range_start: date,
        date_range_end: date,
        items: Sequence[GroceryItem],
        created_at: datetime,
    ) -> GroceryList:
        """Store a new list and return it with assigned ids."""


class GroceryItemStore(Protocol):
    """Item-level access used by the purchase lifecycle."""

    def household_of_item(self, item_id: int) -> Optional[int]:
        """Return the owning household id, or ``None`` when the item is unknown."""

    def update_item(
        self,
        item_id: int,
        mutate: Callable[[GroceryItem], GroceryItem],
    ) -> GroceryItem:
        """Apply ``mutate`` to the stored item in a single transaction.

        Raises :class:`~mealsync.grocery.lifecycle.GroceryItemNotFoundError`
        when the item no longer exists.
        """


__all__ = ["MealSource", "IngredientCatalog", "GroceryListStore", "GroceryItemStore"]
