"""Data access helpers for the household meal calendar."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from mealsync.models.meal import Meal

from .models import MealORM, RecipeORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: MealORM, recipe_ingredients: Optional[str] = None) -> Meal:
    return Meal.model_validate(
        {
            "id": row.id,
            "household_id": row.household_id,
            "date": row.date,
            "title": row.title,
            "meal_type": row.meal_type,
            "notes": row.notes,
            "recipe_id": row.recipe_id,
            "ingredients": effective_ingredients(row.notes, recipe_ingredients),
            "created_at": row.created_at,
        }
    )


def effective_ingredients(notes: Optional[str], recipe_ingredients: Optional[str]) -> str:
    """Meal notes win; otherwise fall back to the linked recipe's ingredient list."""

    if notes and notes.strip():
        return notes
    return recipe_ingredients or ""


def _recipe_ingredients(session: Session, rows: List[MealORM]) -> Dict[int, str]:
    recipe_ids = {row.recipe_id for row in rows if row.recipe_id is not None}
    if not recipe_ids:
        return {}
    recipes = session.execute(
        select(RecipeORM.id, RecipeORM.ingredients).where(RecipeORM.id.in_(recipe_ids))
    ).all()
    return {recipe_id: ingredients for recipe_id, ingredients in recipes}


def _to_models(session: Session, rows: List[MealORM]) -> List[Meal]:
    lookup = _recipe_ingredients(session, rows)
    return [_to_model(row, lookup.get(row.recipe_id) if row.recipe_id else None) for row in rows]


def _check_recipe(session: Session, recipe_id: Optional[int], household_id: int) -> None:
    if recipe_id is None:
        return
    recipe = session.get(RecipeORM, recipe_id)
    if recipe is None or recipe.household_id != household_id:
        raise ValueError(f"Recipe {recipe_id} not found")


def list_meals(
    household_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Meal]:
    """Return household meals ordered by date, optionally bounded (inclusive)."""

    with session_scope() as session:
        query = select(MealORM).where(MealORM.household_id == household_id)
        if start is not None:
            query = query.where(MealORM.date >= start)
        if end is not None:
            query = query.where(MealORM.date <= end)
        rows = list(
            session.execute(query.order_by(MealORM.date.asc(), MealORM.id.asc())).scalars().all()
        )
        return _to_models(session, rows)


def list_meals_in_range(household_id: int, start: date, end: date) -> List[Meal]:
    """Meals in ``[start, end]`` that carry ingredient text."""

    return [meal for meal in list_meals(household_id, start, end) if meal.ingredients.strip()]


def get_meal(meal_id: int) -> Optional[Meal]:
    with session_scope() as session:
        row = session.get(MealORM, meal_id)
        if row is None:
            return None
        return _to_models(session, [row])[0]


def create_meal(
    *,
    household_id: int,
    date: date,
    title: str,
    meal_type: str = "dinner",
    notes: Optional[str] = None,
    recipe_id: Optional[int] = None,
) -> Meal:
    with session_scope() as session:
        _check_recipe(session, recipe_id, household_id)
        row = MealORM(
            household_id=household_id,
            date=date,
            title=title.strip(),
            meal_type=meal_type,
            notes=notes,
            recipe_id=recipe_id,
        )
        session.add(row)
        session.flush()
        return _to_models(session, [row])[0]


def update_meal(
    meal_id: int,
    *,
    date: date | object = _UNSET,
    title: str | object = _UNSET,
    meal_type: str | object = _UNSET,
    notes: str | None | object = _UNSET,
    recipe_id: int | None | object = _UNSET,
) -> Meal:
    with session_scope() as session:
        row = session.get(MealORM, meal_id)
        if row is None:
            raise ValueError(f"Meal {meal_id} not found")

        if date is not _UNSET:
            row.date = date  # type: ignore[assignment]
        if title is not _UNSET:
            row.title = str(title).strip()
        if meal_type is not _UNSET:
            row.meal_type = str(meal_type)
        if notes is not _UNSET:
            row.notes = notes  # type: ignore[assignment]
        if recipe_id is not _UNSET:
            _check_recipe(session, recipe_id, row.household_id)  # type: ignore[arg-type]
            row.recipe_id = recipe_id  # type: ignore[assignment]

        session.flush()
        return _to_models(session, [row])[0]


def delete_meal(meal_id: int) -> Meal:
    """Remove a meal and return its last state."""

    with session_scope() as session:
        row = session.get(MealORM, meal_id)
        if row is None:
            raise ValueError(f"Meal {meal_id} not found")
        removed = _to_models(session, [row])[0]
        session.delete(row)
        return removed


__all__ = [
    "create_meal",
    "delete_meal",
    "effective_ingredients",
    "get_meal",
    "list_meals",
    "list_meals_in_range",
    "update_meal",
]
