"""Food search and pantry (on-hand) management."""

from __future__ import annotations

import logging
from typing import Any

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.common import Page
from tandoor_mcp.models.recipes import Food, UpdateFoodRequest
from tandoor_mcp.utils.pagination import paginate, parse_item, parse_page

logger = logging.getLogger(__name__)


class FoodService:
    """Service for /api/food/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def search(self, query: str, limit: int | None = None) -> Page[Food]:
        """Search foods by name."""
        logger.debug(f"Searching foods with query: {query!r}, limit: {limit}")
        data = self._client.get("/food/", params={"query": query, "page_size": limit})
        return parse_page(data, Food)

    def find(self, name: str) -> Food | None:
        """First search hit for a food name, or None."""
        results = self.search(name, limit=1).results
        return results[0] if results else None

    def set_on_hand(self, food_id: int, available: bool) -> Food:
        """Mark a food as on hand (in the pantry) or not."""
        data = self._client.patch(
            f"/food/{food_id}/",
            body=UpdateFoodRequest(food_onhand=available).model_dump(exclude_none=True),
            not_found=f"Food with ID {food_id} not found",
        )
        return parse_item(data, Food)

    def list_on_hand(self, max_items: int = 100) -> list[Food]:
        """Foods currently marked on hand, scanning up to max_items foods."""

        def fetch(params: dict[str, Any]) -> Any:
            return self._client.get("/food/", params=params)

        raw = paginate(fetch, {"query": "", "page_size": max_items}, max_items=max_items)
        foods = parse_page(raw, Food).results
        return [food for food in foods if food.food_onhand]
