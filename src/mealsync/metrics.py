"""Prometheus metrics definitions for Mealsync."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "mealsync_http_requests_total",
    "Total number of HTTP requests processed by the Mealsync API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "mealsync_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Mealsync API",
    ["method", "path"],
)

GROCERY_LISTS_GENERATED = Counter(
    "mealsync_grocery_lists_generated_total",
    "Number of grocery lists generated from meal plans",
)

GROCERY_ITEMS_CONSOLIDATED = Counter(
    "mealsync_grocery_items_consolidated_total",
    "Number of consolidated grocery items written to generated lists",
)

GROCERY_TOGGLES = Counter(
    "mealsync_grocery_item_toggles_total",
    "Purchase-state toggles applied to grocery items",
    ["direction"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "GROCERY_LISTS_GENERATED",
    "GROCERY_ITEMS_CONSOLIDATED",
    "GROCERY_TOGGLES",
]
