"""Tests for the meal calendar repository."""

from __future__ import annotations

from datetime import date

import pytest

from mealsync.db.households import create_household
from mealsync.db.meals import (
    create_meal,
    delete_meal,
    effective_ingredients,
    get_meal,
    list_meals,
    list_meals_in_range,
    update_meal,
)
from mealsync.db.recipes import create_recipe, delete_recipe


def test_effective_ingredients_prefers_notes():
    assert effective_ingredients("2 eggs", "1 kg flour") == "2 eggs"
    assert effective_ingredients("   ", "1 kg flour") == "1 kg flour"
    assert effective_ingredients(None, None) == ""


def test_list_meals_filters_by_inclusive_range(household):
    create_meal(household_id=household.id, date=date(2025, 3, 2), title="Before", notes="salt")
    create_meal(household_id=household.id, date=date(2025, 3, 3), title="Start", notes="salt")
    create_meal(household_id=household.id, date=date(2025, 3, 9), title="End", notes="salt")
    create_meal(household_id=household.id, date=date(2025, 3, 10), title="After", notes="salt")

    meals = list_meals(household.id, date(2025, 3, 3), date(2025, 3, 9))

    assert [meal.title for meal in meals] == ["Start", "End"]
    assert len(list_meals(household.id)) == 4


def test_meal_falls_back_to_recipe_ingredients(household):
    recipe = create_recipe(household_id=household.id, name="Mash", ingredients="1 kg potatoes")

    meal = create_meal(
        household_id=household.id,
        date=date(2025, 3, 3),
        title="Mash night",
        recipe_id=recipe.id,
    )

    assert meal.ingredients == "1 kg potatoes"
    assert meal.recipe_id == recipe.id


def test_meals_in_range_skip_meals_without_ingredients(household):
    create_meal(household_id=household.id, date=date(2025, 3, 3), title="Takeaway")
    create_meal(household_id=household.id, date=date(2025, 3, 4), title="Eggs", notes="3 eggs")

    meals = list_meals_in_range(household.id, date(2025, 3, 1), date(2025, 3, 7))

    assert [meal.title for meal in meals] == ["Eggs"]


def test_recipe_from_other_household_rejected(household, other_member):
    other = create_household(name="Cabin", owner_id=other_member.id)
    foreign = create_recipe(household_id=other.id, name="Stew")

    with pytest.raises(ValueError):
        create_meal(
            household_id=household.id,
            date=date(2025, 3, 3),
            title="Borrowed",
            recipe_id=foreign.id,
        )


def test_update_meal_changes_only_given_fields(household):
    meal = create_meal(
        household_id=household.id,
        date=date(2025, 3, 3),
        title="Curry",
        meal_type="dinner",
        notes="1 kg chicken",
    )

    updated = update_meal(meal.id, title="Chicken curry", notes=None)

    assert updated.title == "Chicken curry"
    assert updated.notes is None
    assert updated.ingredients == ""
    assert updated.date == date(2025, 3, 3)
    assert updated.meal_type == "dinner"


def test_deleting_recipe_unlinks_meal(household):
    recipe = create_recipe(household_id=household.id, name="Mash", ingredients="1 kg potatoes")
    meal = create_meal(
        household_id=household.id,
        date=date(2025, 3, 3),
        title="Mash night",
        recipe_id=recipe.id,
    )

    delete_recipe(recipe.id)

    refreshed = get_meal(meal.id)
    assert refreshed.recipe_id is None
    assert refreshed.ingredients == ""


def test_delete_meal_returns_last_state(household):
    meal = create_meal(household_id=household.id, date=date(2025, 3, 3), title="Soup")

    removed = delete_meal(meal.id)

    assert removed.id == meal.id
    assert get_meal(meal.id) is None
    with pytest.raises(ValueError):
        delete_meal(meal.id)
