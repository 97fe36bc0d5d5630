"""Tests for consolidation of parsed ingredient lines."""

from __future__ import annotations

import pytest

from mealsync.grocery import consolidate, parse_ingredients, week_plan_items
from mealsync.models.grocery import GroceryItem, ParsedEntry


def _summary(items):
    return [(item.id, item.name, item.quantity, item.unit) for item in items]


def test_units_and_names_sorted_alphabetically():
    items = parse_ingredients("2 kg potatoes\n1.5 cups flour")

    assert _summary(items) == [
        ("flour|cups", "flour", 1.5, "cups"),
        ("potatoes|kg", "potatoes", 2, "kg"),
    ]


def test_name_only_lines():
    items = parse_ingredients("salt\npepper\nonions")

    assert _summary(items) == [
        ("onions", "onions", 1, None),
        ("pepper", "pepper", 1, None),
        ("salt", "salt", 1, None),
    ]


def test_same_unit_quantities_are_summed():
    items = parse_ingredients("2 kg potatoes\n1 kg potatoes\n0.5 kg potatoes")

    assert len(items) == 1
    assert items[0].id == "potatoes|kg"
    assert items[0].quantity == pytest.approx(3.5)


def test_different_units_never_merge():
    items = parse_ingredients("2 kg potatoes\n500 g potatoes")

    by_id = {item.id: item for item in items}
    assert set(by_id) == {"potatoes|kg", "potatoes|g"}
    assert by_id["potatoes|kg"].quantity == 2
    assert by_id["potatoes|g"].quantity == 500


def test_case_insensitive_merge():
    items = parse_ingredients("Chicken breast\nchicken breast\nCHICKEN BREAST")

    assert _summary(items) == [("chicken breast", "chicken breast", 3, None)]


def test_unit_case_variants_merge_and_keep_first_spelling():
    items = parse_ingredients("2 KG potatoes\n1 kg potatoes")

    assert len(items) == 1
    assert items[0].unit == "KG"
    assert items[0].quantity == 3


def test_two_token_numeric_lines_are_unitless():
    items = parse_ingredients("3 eggs\n2 apples")

    assert _summary(items) == [
        ("apples", "apples", 2, None),
        ("eggs", "eggs", 3, None),
    ]


def test_name_only_duplicates_are_counted():
    items = parse_ingredients("salt\nsalt\nsalt")

    assert _summary(items) == [("salt", "salt", 3, None)]


def test_mixed_lines():
    items = parse_ingredients("2 kg potatoes\nsalt\n1.5 cups milk\nsalt")

    assert [item.id for item in items] == ["milk|cups", "potatoes|kg", "salt"]
    assert items[2].quantity == 2


@pytest.mark.parametrize("text", ["", "   \n  \n  "])
def test_empty_input_yields_empty_list(text):
    assert parse_ingredients(text) == []


def test_same_name_ties_keep_first_seen_order():
    items = parse_ingredients("500 g potatoes\n2 kg potatoes")

    assert [item.id for item in items] == ["potatoes|g", "potatoes|kg"]


def test_output_is_deterministic():
    text = "2 kg potatoes\nsalt\n3 eggs\n1 kg potatoes\nSalt"

    first = parse_ingredients(text)
    second = parse_ingredients(text)

    assert [item.model_dump() for item in first] == [item.model_dump() for item in second]


def test_consolidating_consolidated_items_is_stable():
    items = parse_ingredients("2 kg potatoes\n1 kg potatoes\nsalt\nsalt\n3 eggs\n500 g rice")

    again = consolidate(
        ParsedEntry(name=item.name, quantity=item.quantity, unit=item.unit) for item in items
    )

    assert again == items
    assert sum(item.quantity for item in again) == sum(item.quantity for item in items)


def test_items_are_unpurchased_grocery_items():
    (item,) = parse_ingredients("2 kg potatoes")

    assert isinstance(item, GroceryItem)
    assert item.purchased is False
    assert item.purchased_by is None
    assert item.purchased_at is None


def test_week_plan_merges_across_days():
    week_plan = {
        "Mon": ["2 kg potatoes"],
        "Tue": ["1 kg potatoes"],
        "Wed": [],
    }

    items = week_plan_items(week_plan)

    assert _summary(items) == [("potatoes|kg", "potatoes", 3, "kg")]


def test_week_plan_with_several_meals():
    week_plan = {
        "Mon": ["2 eggs\n1 cup milk", "1 kg chicken\nsalt"],
        "Tue": ["2 kg potatoes\n1 kg chicken", ""],
        "Wed": [],
    }

    items = week_plan_items(week_plan)

    assert _summary(items) == [
        ("chicken|kg", "chicken", 2, "kg"),
        ("eggs", "eggs", 2, None),
        ("milk|cup", "milk", 1, "cup"),
        ("potatoes|kg", "potatoes", 2, "kg"),
        ("salt", "salt", 1, None),
    ]
