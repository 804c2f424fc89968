"""Shopping list data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tandoor_mcp.models.common import TandoorModel, UserRef
from tandoor_mcp.models.recipes import Food, Unit


class ShoppingListEntry(TandoorModel):
    id: int
    food: Food
    unit: Unit | None = None
    amount: float = 0.0
    order: int = 0
    checked: bool = False
    created_at: datetime | None = None
    completed_at: datetime | None = None
    delay_until: datetime | None = None
    created_by: UserRef | None = None

    @property
    def unit_name(self) -> str | None:
        return self.unit.name if self.unit else None


class CreateShoppingListEntryRequest(BaseModel):
    food: int
    unit: int | None = None
    amount: float = 1.0


class BulkShoppingListRequest(BaseModel):
    entries: list[CreateShoppingListEntryRequest] = Field(default_factory=list)


class UpdateShoppingListEntryRequest(BaseModel):
    checked: bool | None = None
    amount: float | None = None
