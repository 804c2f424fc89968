"""Structured tool arguments."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ShoppingItem(BaseModel):
    """An item to put on the shopping list, by food name."""
    name: str = Field(description="Food name, resolved via food search")
    amount: float = Field(default=1.0, description="Quantity to buy")
    unit: str | None = Field(default=None, description="Unit name, informational only")


class PantryItem(BaseModel):
    """A pantry availability change, by food name."""
    food: str = Field(description="Food name, resolved via food search")
    available: bool = Field(description="Whether the food is on hand")
    amount: float | None = Field(default=None, description="Quantity on hand, informational only")
