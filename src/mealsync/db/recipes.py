"""Recipe library persistence helpers."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from mealsync.models.meal import Recipe

from .models import RecipeORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: RecipeORM) -> Recipe:
    return Recipe.model_validate(
        {
            "id": row.id,
            "household_id": row.household_id,
            "name": row.name,
            "description": row.description,
            "ingredients": row.ingredients or "",
            "created_at": row.created_at,
        }
    )


def list_recipes(household_id: int) -> List[Recipe]:
    """Return a household's recipes ordered by name."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(RecipeORM)
                .where(RecipeORM.household_id == household_id)
                .order_by(RecipeORM.name.asc(), RecipeORM.id.asc())
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def create_recipe(
    *,
    household_id: int,
    name: str,
    ingredients: str = "",
    description: Optional[str] = None,
) -> Recipe:
    with session_scope() as session:
        row = RecipeORM(
            household_id=household_id,
            name=name.strip(),
            ingredients=ingredients,
            description=description,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def get_recipe(recipe_id: int) -> Optional[Recipe]:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            return None
        return _to_model(row)


def update_recipe(
    recipe_id: int,
    *,
    name: str | object = _UNSET,
    ingredients: str | object = _UNSET,
    description: str | None | object = _UNSET,
) -> Recipe:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise ValueError(f"Recipe {recipe_id} not found")
        if name is not _UNSET:
            row.name = str(name).strip()
        if ingredients is not _UNSET:
            row.ingredients = str(ingredients)
        if description is not _UNSET:
            row.description = description  # type: ignore[assignment]
        session.flush()
        return _to_model(row)


def delete_recipe(recipe_id: int) -> None:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise ValueError(f"Recipe {recipe_id} not found")
        session.delete(row)


__all__ = ["create_recipe", "delete_recipe", "get_recipe", "list_recipes", "update_recipe"]
