"""Tests for grocery list generation over in-memory collaborators."""

from __future__ import annotations

from datetime import date, datetime, timezone
from itertools import count

import pytest

from mealsync.events import GROCERY_LIST_CREATED
from mealsync.grocery import GroceryListAssembler, consolidate_texts
from mealsync.models.grocery import GroceryList
from mealsync.models.meal import Meal

FIXED_NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def _meal(meal_id, household_id, day, ingredients):
    return Meal(
        id=meal_id,
        household_id=household_id,
        date=day,
        title=f"Meal {meal_id}",
        ingredients=ingredients,
        created_at=FIXED_NOW,
    )


class FakeMeals:
    def __init__(self, meals):
        self.meals = list(meals)
        self.calls = []

    def meals_in_range(self, household_id, start, end):
        self.calls.append((household_id, start, end))
        return [
            meal
            for meal in self.meals
            if meal.household_id == household_id and start <= meal.date <= end
        ]


class FakeCatalog:
    def __init__(self):
        self.ids = {}
        self._next = count(1)

    def find_or_create(self, name, unit=None):
        if name not in self.ids:
            self.ids[name] = next(self._next)
        return self.ids[name]


class FakeLists:
    def __init__(self):
        self.created = []
        self._next = count(1)

    def create_list(self, *, household_id, date_range_start, date_range_end, items, created_at):
        grocery_list = GroceryList(
            id=next(self._next),
            household_id=household_id,
            date_range_start=date_range_start,
            date_range_end=date_range_end,
            items=list(items),
            created_at=created_at,
        )
        self.created.append(grocery_list)
        return grocery_list


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, household_id, event, payload):
        self.events.append((household_id, event, payload))


@pytest.fixture()
def meals():
    return FakeMeals(
        [
            _meal(1, 1, date(2025, 3, 3), "2 kg potatoes\nsalt"),
            _meal(2, 1, date(2025, 3, 4), "1 kg potatoes\n3 eggs"),
            _meal(3, 1, date(2025, 3, 5), ""),
            _meal(4, 1, date(2025, 3, 12), "1 l milk"),
            _meal(5, 2, date(2025, 3, 4), "5 kg flour"),
        ]
    )


@pytest.fixture()
def publisher():
    return RecordingPublisher()


@pytest.fixture()
def assembler(meals, publisher):
    return GroceryListAssembler(
        meals=meals,
        catalog=FakeCatalog(),
        lists=FakeLists(),
        publisher=publisher,
        clock=lambda: FIXED_NOW,
    )


def test_generate_merges_across_meals(assembler, meals):
    grocery_list = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 7))

    assert meals.calls == [(1, date(2025, 3, 1), date(2025, 3, 7))]
    assert [(item.id, item.quantity) for item in grocery_list.items] == [
        ("eggs", 3),
        ("potatoes|kg", 3),
        ("salt", 1),
    ]
    assert grocery_list.household_id == 1
    assert grocery_list.date_range_start == date(2025, 3, 1)
    assert grocery_list.date_range_end == date(2025, 3, 7)
    assert grocery_list.created_at == FIXED_NOW


def test_generate_matches_direct_consolidation(assembler):
    grocery_list = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 31))

    expected = consolidate_texts(["2 kg potatoes\nsalt", "1 kg potatoes\n3 eggs", "1 l milk"])
    assert [(item.id, item.quantity, item.unit) for item in grocery_list.items] == [
        (item.id, item.quantity, item.unit) for item in expected
    ]


def test_generate_resolves_ingredient_ids(assembler):
    first = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 7))
    second = assembler.generate(1, date(2025, 3, 3), date(2025, 3, 4))

    assert all(item.ingredient_id is not None for item in first.items)
    first_ids = {item.name: item.ingredient_id for item in first.items}
    second_ids = {item.name: item.ingredient_id for item in second.items}
    assert first_ids == second_ids


def test_generate_always_creates_a_new_list(assembler):
    first = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 7))
    second = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 7))

    assert first.id != second.id
    assert [item.id for item in first.items] == [item.id for item in second.items]


def test_generate_with_no_meals_yields_empty_list(assembler):
    grocery_list = assembler.generate(1, date(2025, 4, 1), date(2025, 4, 7))

    assert grocery_list.items == []


def test_single_day_range_is_inclusive(assembler):
    grocery_list = assembler.generate(1, date(2025, 3, 12), date(2025, 3, 12))

    assert [item.id for item in grocery_list.items] == ["milk|l"]


def test_generate_rejects_inverted_range(assembler, meals):
    with pytest.raises(ValueError):
        assembler.generate(1, date(2025, 3, 7), date(2025, 3, 1))

    assert meals.calls == []


def test_generate_publishes_list_created(assembler, publisher):
    grocery_list = assembler.generate(2, date(2025, 3, 1), date(2025, 3, 7))

    assert publisher.events == [(2, GROCERY_LIST_CREATED, grocery_list)]
    assert [item.id for item in grocery_list.items] == ["flour|kg"]


def test_generate_without_publisher():
    assembler = GroceryListAssembler(
        meals=FakeMeals([_meal(1, 1, date(2025, 3, 3), "salt")]),
        catalog=FakeCatalog(),
        lists=FakeLists(),
    )

    grocery_list = assembler.generate(1, date(2025, 3, 1), date(2025, 3, 7))

    assert [item.id for item in grocery_list.items] == ["salt"]
