"""Plain-text renderers for grocery lists.

All renderers are pure: they return strings and leave clipboard or file
delivery to the caller.
"""

from __future__ import annotations

from typing import Dict, Iterable

from mealsync.models.grocery import CategorizedBucket, GroceryItem

from .categories import non_empty_buckets

DOWNLOAD_FILENAME = "grocery_list.txt"
DOWNLOAD_MEDIA_TYPE = "text/plain"

BULLET = "•"
CHECKMARK = "✓"
TIMES = "×"


def format_quantity(quantity: float) -> str:
    """Render ``2.0`` as ``2`` and keep fractional quantities as-is."""

    value = float(quantity)
    if value.is_integer():
        return str(int(value))
    return str(value)


def _purchased_prefix(item: GroceryItem) -> str:
    return f"{CHECKMARK} " if item.purchased else ""


def format_item_line(item: GroceryItem) -> str:
    unit = f" {item.unit}" if item.unit else ""
    return (
        f"{BULLET} {_purchased_prefix(item)}{format_quantity(item.quantity)}{unit} {TIMES} {item.name}"
    )


def format_plain(items: Iterable[GroceryItem]) -> str:
    """One bullet line per item, in the order given."""

    return "\n".join(format_item_line(item) for item in items)


def format_categorized(categorized: Dict[str, CategorizedBucket]) -> str:
    """Header plus bullet lines for each populated bucket, separated by blank lines."""

    blocks = []
    for bucket in non_empty_buckets(categorized):
        header = f"{bucket.category.icon} {bucket.category.name}"
        lines = [header, *(format_item_line(item) for item in bucket.items)]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_download_line(item: GroceryItem) -> str:
    unit = f" ({item.unit})" if item.unit else ""
    return f"{_purchased_prefix(item)}{format_quantity(item.quantity)}\t{item.name}{unit}"


def format_download(items: Iterable[GroceryItem]) -> str:
    """Tab-separated lines for the downloadable file, no headers."""

    return "\n".join(format_download_line(item) for item in items)


__all__ = [
    "DOWNLOAD_FILENAME",
    "DOWNLOAD_MEDIA_TYPE",
    "format_categorized",
    "format_download",
    "format_item_line",
    "format_plain",
    "format_quantity",
]
