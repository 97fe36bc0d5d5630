"""Pydantic models defining shared data contracts."""

from mealsync.models.grocery import (
    CategorizedBucket,
    GroceryCategory,
    GroceryItem,
    GroceryList,
    ParsedEntry,
    canonical_key,
)
from mealsync.models.household import Household, Member, MemberRef
from mealsync.models.meal import Meal, MealType, Recipe

__all__ = [
    "CategorizedBucket",
    "GroceryCategory",
    "GroceryItem",
    "GroceryList",
    "ParsedEntry",
    "canonical_key",
    "Household",
    "Member",
    "MemberRef",
    "Meal",
    "MealType",
    "Recipe",
]
