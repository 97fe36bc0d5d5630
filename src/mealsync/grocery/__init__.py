"""Grocery-list consolidation engine.

Pipeline: raw ingredient text -> :func:`normalize_lines` -> :func:`parse_line`
-> :func:`consolidate` -> :func:`categorize` -> export formatters.
"""

from mealsync.grocery.assembler import (
    GroceryListAssembler,
    consolidate_texts,
    week_plan_items,
)
from mealsync.grocery.categories import (
    GROCERY_CATEGORIES,
    OTHER_CATEGORY,
    OTHER_CATEGORY_NAME,
    categorize,
    match_category,
    non_empty_buckets,
)
from mealsync.grocery.consolidator import consolidate, parse_ingredients
from mealsync.grocery.export import (
    DOWNLOAD_FILENAME,
    DOWNLOAD_MEDIA_TYPE,
    format_categorized,
    format_download,
    format_plain,
)
from mealsync.grocery.lifecycle import GroceryItemNotFoundError, ItemLifecycle, toggle_purchased
from mealsync.grocery.normalizer import normalize_lines
from mealsync.grocery.parser import parse_line, parse_lines

__all__ = [
    "DOWNLOAD_FILENAME",
    "DOWNLOAD_MEDIA_TYPE",
    "GROCERY_CATEGORIES",
    "OTHER_CATEGORY",
    "OTHER_CATEGORY_NAME",
    "GroceryItemNotFoundError",
    "GroceryListAssembler",
    "ItemLifecycle",
    "categorize",
    "consolidate",
    "consolidate_texts",
    "format_categorized",
    "format_download",
    "format_plain",
    "match_category",
    "non_empty_buckets",
    "normalize_lines",
    "parse_ingredients",
    "parse_line",
    "parse_lines",
    "toggle_purchased",
    "week_plan_items",
]
