"""Meal planning and cook log services."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.common import Page
from tandoor_mcp.models.meal_plans import (
    CookLog,
    CreateCookLogRequest,
    CreateMealPlanRequest,
    MealPlan,
    MealType,
)
from tandoor_mcp.utils.pagination import parse_item, parse_page

logger = logging.getLogger(__name__)


class MealPlanService:
    """Service for /api/meal-plan/ and /api/meal-type/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def list(self, from_date: date, to_date: date) -> Page[MealPlan]:
        """Meal plans between two days, inclusive."""
        data = self._client.get(
            "/meal-plan/",
            params={"from_date": from_date.isoformat(), "to_date": to_date.isoformat()},
        )
        return parse_page(data, MealPlan)

    def create(self, request: CreateMealPlanRequest) -> MealPlan:
        body = request.model_dump(mode="json", exclude_none=True)
        logger.debug(f"Creating meal plan for {body['from_date']}")
        data = self._client.post("/meal-plan/", body=body)
        return parse_item(data, MealPlan)

    def delete(self, plan_id: int) -> None:
        self._client.delete(
            f"/meal-plan/{plan_id}/",
            not_found=f"Meal plan {plan_id} not found",
        )

    def meal_types(self) -> Page[MealType]:
        data = self._client.get("/meal-type/")
        return parse_page(data, MealType)


class CookLogService:
    """Service for /api/cook-log/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def list(self, recipe_id: int | None = None, days_back: int = 30) -> Page[CookLog]:
        """Cook log entries from the last ``days_back`` days, optionally for one recipe."""
        since = date.today() - timedelta(days=days_back)
        data = self._client.get(
            "/cook-log/",
            params={"recipe": recipe_id, "from_date": since.isoformat()},
        )
        return parse_page(data, CookLog)

    def log(self, request: CreateCookLogRequest) -> CookLog:
        """Record that a recipe was cooked."""
        data = self._client.post(
            "/cook-log/",
            body=request.model_dump(exclude_none=True),
            not_found=f"Recipe with ID {request.recipe} not found",
        )
        entry = parse_item(data, CookLog)
        logger.info(f"Logged cooking of recipe {request.recipe}")
        return entry
