"""Recipe, food and catalog data models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from tandoor_mcp.models.common import TandoorModel, UserRef


class Keyword(TandoorModel):
    """Recipe keyword/tag.

    Search endpoints send ``label`` while detail endpoints send ``name``;
    ``name`` is always populated after parsing.
    """
    id: int
    name: str
    label: str | None = None
    description: str | None = None
    full_name: str | None = None
    parent: Any = None
    numchild: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _name_from_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name") and data.get("label"):
            data = {**data, "name": data["label"]}
        return data


class Unit(TandoorModel):
    id: int
    name: str
    plural_name: str | None = None
    description: str | None = None
    base_unit: str | None = None
    type: str | None = None


class Food(TandoorModel):
    id: int
    name: str
    plural_name: str | None = None
    description: str | None = None
    food_onhand: bool = False
    supermarket_category: Any = None


class Ingredient(TandoorModel):
    id: int | None = None
    food: Food | None = None
    unit: Unit | None = None
    amount: float = 0.0
    note: str | None = None
    order: int = 0
    is_header: bool = False
    no_amount: bool = False


class Step(TandoorModel):
    id: int | None = None
    name: str = ""
    instruction: str = ""
    ingredients: list[Ingredient] = Field(default_factory=list)
    time: int | None = None
    order: int = 0


class Nutrition(TandoorModel):
    calories: float | None = None
    proteins: float | None = None
    fats: float | None = None
    carbs: float | None = None


class Recipe(TandoorModel):
    """A recipe as returned by /api/recipe/. List results omit steps."""
    id: int
    name: str
    description: str | None = None
    servings: int | None = None
    working_time: int | None = None
    waiting_time: int | None = None
    keywords: list[Keyword] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)
    nutrition: Nutrition | None = None
    image: str | None = None
    source_url: str | None = None
    rating: float | None = None
    last_cooked: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: UserRef | None = None
    internal: bool | None = None

    @property
    def total_time(self) -> int:
        return (self.working_time or 0) + (self.waiting_time or 0)

    @property
    def keyword_names(self) -> list[str]:
        return [k.name for k in self.keywords]

    def ingredients(self) -> list[Ingredient]:
        """All ingredients across steps, in step order."""
        return [ing for step in self.steps for ing in step.ingredients]


# ── Request models ───────────────────────────────────────────────────

class NameRef(BaseModel):
    """Create-by-name reference used for nested keywords, foods and units."""
    name: str


class CreateIngredientRequest(BaseModel):
    food: NameRef
    unit: NameRef | None = None
    amount: str = "0"
    note: str | None = None
    order: int = 0
    is_header: bool = False
    no_amount: bool = False


class CreateStepRequest(BaseModel):
    name: str = ""
    instruction: str
    ingredients: list[CreateIngredientRequest] = Field(default_factory=list)
    time: int | None = None
    order: int = 0


class CreateRecipeRequest(BaseModel):
    name: str
    description: str | None = None
    servings: int | None = None
    working_time: int = 0
    waiting_time: int = 0
    keywords: list[NameRef] = Field(default_factory=list)
    steps: list[CreateStepRequest] = Field(default_factory=list)


class UpdateRecipeKeywordsRequest(BaseModel):
    keywords: list[NameRef]


class ImportRecipeRequest(BaseModel):
    url: str


class UpdateFoodRequest(BaseModel):
    food_onhand: bool | None = None
