"""Merge parsed ingredient entries into deduplicated grocery items."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from mealsync.models.grocery import GroceryItem, ParsedEntry

from .normalizer import normalize_lines
from .parser import parse_lines


class _Accumulator:
    __slots__ = ("name", "unit", "quantity")

    def __init__(self, name: str, unit: Optional[str], quantity: float) -> None:
        self.name = name
        self.unit = unit
        self.quantity = quantity


def consolidate(entries: Iterable[ParsedEntry]) -> List[GroceryItem]:
    """Sum quantities per canonical key and return items sorted by name.

    Entries merge only when their keys are identical, so the same ingredient
    listed in different units stays split. The first occurrence of a key
    decides the unit spelling shown to users. Sorting is stable: items sharing
    a name keep their first-seen order.
    """

    merged: Dict[str, _Accumulator] = {}
    for entry in entries:
        key = entry.key
        existing = merged.get(key)
        if existing is None:
            merged[key] = _Accumulator(entry.name, entry.unit, entry.quantity)
        else:
            existing.quantity += entry.quantity

    items = [
        GroceryItem(id=key, name=acc.name, quantity=acc.quantity, unit=acc.unit)
        for key, acc in merged.items()
    ]
    return sorted(items, key=lambda item: item.name.lower())


def parse_ingredients(text: str | None) -> List[GroceryItem]:
    """Run normalization, parsing and consolidation over a raw text block."""

    return consolidate(parse_lines(normalize_lines(text)))


__all__ = ["consolidate", "parse_ingredients"]
