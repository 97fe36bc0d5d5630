"""Meal calendar and recipe library models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class Recipe(BaseModel):
    """Recipe stored in a household library."""

    id: int
    household_id: int
    name: str
    description: Optional[str] = Field(default=None)
    ingredients: str = Field(default="", description="Newline-delimited ingredient lines.")
    created_at: datetime

    model_config = ConfigDict(frozen=True)


class Meal(BaseModel):
    """Meal scheduled on a household calendar."""

    id: int
    household_id: int
    date: date
    title: str
    meal_type: MealType = Field(default="dinner")
    notes: Optional[str] = Field(default=None)
    recipe_id: Optional[int] = Field(default=None)
    ingredients: str = Field(
        default="",
        description="Effective ingredient text: meal notes, else the linked recipe's ingredients.",
    )
    created_at: datetime

    model_config = ConfigDict(frozen=True)


__all__ = ["MealType", "Meal", "Recipe"]
