"""Meal planning and cook log data models."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel

from tandoor_mcp.models.common import TandoorModel, UserRef
from tandoor_mcp.models.recipes import Recipe


class MealType(TandoorModel):
    id: int
    name: str
    order: int = 0
    color: str | None = None
    icon: str | None = None
    default: bool = False


class MealPlan(TandoorModel):
    id: int
    title: str | None = None
    recipe: Recipe | None = None
    servings: float = 1
    note: str | None = None
    from_date: date | datetime | None = None
    meal_type: MealType
    created_by: UserRef | None = None

    @property
    def day(self) -> str | None:
        """The planned day as YYYY-MM-DD."""
        if self.from_date is None:
            return None
        return self.from_date.strftime("%Y-%m-%d")


class CookLog(TandoorModel):
    id: int
    recipe: int | Recipe
    servings: float | None = None
    rating: int | None = None
    comment: str | None = None
    created_at: datetime | None = None
    created_by: UserRef | None = None

    @property
    def recipe_id(self) -> int:
        return self.recipe if isinstance(self.recipe, int) else self.recipe.id

    @property
    def recipe_name(self) -> str | None:
        return None if isinstance(self.recipe, int) else self.recipe.name


class CreateMealPlanRequest(BaseModel):
    recipe: int | None = None
    title: str | None = None
    servings: int
    from_date: date
    meal_type: int
    note: str | None = None


class CreateCookLogRequest(BaseModel):
    recipe: int
    servings: int = 1
    rating: int | None = None
    comment: str | None = None
