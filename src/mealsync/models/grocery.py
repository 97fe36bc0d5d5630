"""Grocery list models shared by the consolidation engine and the API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mealsync.models.household import MemberRef


class ParsedEntry(BaseModel):
    """One ingredient line decomposed into name, quantity and optional unit."""

    name: str
    quantity: float = Field(default=1.0)
    unit: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> str:
        """Canonical merge key: ``name`` or ``name|unit`` (lower-cased)."""

        return canonical_key(self.name, self.unit)


def canonical_key(name: str, unit: Optional[str]) -> str:
    normalized = name.strip().lower()
    if unit:
        return f"{normalized}|{unit.lower()}"
    return normalized


class GroceryItem(BaseModel):
    """Consolidated grocery entry, optionally backed by a persisted row."""

    id: str = Field(description="Canonical merge key.")
    name: str
    quantity: float
    unit: Optional[str] = Field(default=None)
    purchased: bool = Field(default=False)
    purchased_by: Optional[MemberRef] = Field(default=None)
    purchased_at: Optional[datetime] = Field(default=None)
    item_id: Optional[int] = Field(default=None, description="Row id once persisted.")
    grocery_list_id: Optional[int] = Field(default=None)
    ingredient_id: Optional[int] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class GroceryCategory(BaseModel):
    """Static category definition consulted by the categorizer."""

    name: str
    keywords: tuple[str, ...] = Field(default_factory=tuple)
    color: str
    icon: str

    model_config = ConfigDict(frozen=True)


class CategorizedBucket(BaseModel):
    """Items assigned to one category, sorted by name."""

    category: GroceryCategory
    items: list[GroceryItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class GroceryList(BaseModel):
    """Snapshot produced by a single generation request."""

    id: int
    household_id: int
    date_range_start: date
    date_range_end: date
    items: list[GroceryItem] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(frozen=True)


__all__ = [
    "ParsedEntry",
    "GroceryItem",
    "GroceryCategory",
    "CategorizedBucket",
    "GroceryList",
    "canonical_key",
]
