"""MCP server wiring: registers TandoorTools methods as FastMCP tools.

stdout carries the MCP stdio transport, so logging goes to stderr only.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from tandoor_mcp.models.tools import PantryItem, ShoppingItem
from tandoor_mcp.tools import TandoorTools

SERVER_NAME = "tandoor"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, openWorldHint=True)
WRITES = ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=True)


def configure_logging(level: str = "INFO") -> None:
    """Send all log output to stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _dump(result: dict[str, Any]) -> str:
    return json.dumps(result, indent=2, default=str)


def create_server(tools: TandoorTools) -> FastMCP:
    """Build a FastMCP server whose tools delegate to ``tools``."""
    mcp = FastMCP(SERVER_NAME)

    # ── Recipes ──────────────────────────────────────────────────────

    @mcp.tool(annotations=READ_ONLY)
    def search_recipes(query: str | None = None, limit: int | None = None) -> str:
        """Search for recipes by name or text. Omit query to list recipes.

        Args:
            query: Search terms
            limit: Maximum results to return
        """
        return _dump(tools.search_recipes(query=query, limit=limit))

    @mcp.tool(annotations=READ_ONLY)
    def get_recipe_details(id: int, servings: int | None = None) -> str:
        """Get a recipe with instructions and ingredients, optionally scaled to a number of servings."""
        return _dump(tools.get_recipe_details(id=id, servings=servings))

    @mcp.tool(annotations=WRITES)
    def create_recipe(
        name: str,
        description: str | None = None,
        instructions: str | None = None,
        servings: int | None = None,
        prep_time: int | None = None,
        cook_time: int | None = None,
        keywords: list[str] | None = None,
    ) -> str:
        """Create a new recipe. Instructions become a single step; times are in minutes."""
        return _dump(
            tools.create_recipe(
                name=name,
                description=description,
                instructions=instructions,
                servings=servings,
                prep_time=prep_time,
                cook_time=cook_time,
                keywords=keywords,
            )
        )

    @mcp.tool(annotations=WRITES)
    def import_recipe_from_url(url: str) -> str:
        """Import a recipe from an external website."""
        return _dump(tools.import_recipe_from_url(url=url))

    # ── Foods & pantry ───────────────────────────────────────────────

    @mcp.tool(annotations=READ_ONLY)
    def search_foods(query: str, limit: int | None = None) -> str:
        """Search foods/ingredients by name, including whether each is on hand."""
        return _dump(tools.search_foods(query=query, limit=limit))

    @mcp.tool(annotations=WRITES)
    def update_pantry(items: list[PantryItem]) -> str:
        """Mark foods as available (on hand) or not. Each food name resolves to its first search match."""
        return _dump(tools.update_pantry(items=items))

    @mcp.tool(annotations=READ_ONLY)
    def get_keywords() -> str:
        """List all recipe keywords/tags."""
        return _dump(tools.get_keywords())

    @mcp.tool(annotations=READ_ONLY)
    def get_units() -> str:
        """List available measurement units."""
        return _dump(tools.get_units())

    # ── Shopping list ────────────────────────────────────────────────

    @mcp.tool(annotations=READ_ONLY)
    def get_shopping_list(format: str = "flat") -> str:
        """Get the shopping list, either "flat" or "grouped" into checked and unchecked items."""
        return _dump(tools.get_shopping_list(format=format))

    @mcp.tool(annotations=WRITES)
    def add_to_shopping_list(
        items: list[ShoppingItem] | None = None,
        request: str | None = None,
    ) -> str:
        """Add items to the shopping list by food name.

        Args:
            items: Items as {name, amount, unit}
            request: Free-text request (answered with usage guidance)
        """
        return _dump(tools.add_to_shopping_list(items=items, request=request))

    @mcp.tool(annotations=WRITES)
    def update_shopping_item(id: int, amount: float | None = None, checked: bool | None = None) -> str:
        """Change the amount or checked state of a shopping list entry."""
        return _dump(tools.update_shopping_item(id=id, amount=amount, checked=checked))

    @mcp.tool(annotations=DESTRUCTIVE)
    def remove_shopping_item(id: int) -> str:
        """Remove an entry from the shopping list."""
        return _dump(tools.remove_shopping_item(id=id))

    @mcp.tool(annotations=WRITES)
    def check_shopping_items(items: list[int | str]) -> str:
        """Mark shopping list items as purchased, by entry id or by food name."""
        return _dump(tools.check_shopping_items(items=items))

    @mcp.tool(annotations=DESTRUCTIVE)
    def clear_shopping_list() -> str:
        """Remove checked items from the shopping list and mark their foods as on hand."""
        return _dump(tools.clear_shopping_list())

    # ── Meal planning ────────────────────────────────────────────────

    @mcp.tool(annotations=READ_ONLY)
    def get_meal_plans(from_date: str, to_date: str, meal_type: str | None = None) -> str:
        """Get meal plans between two dates (YYYY-MM-DD), optionally for one meal type name."""
        return _dump(tools.get_meal_plans(from_date=from_date, to_date=to_date, meal_type=meal_type))

    @mcp.tool(annotations=WRITES)
    def create_meal_plan(
        servings: int,
        date: str,
        meal_type: int,
        recipe_id: int | None = None,
        title: str | None = None,
        note: str | None = None,
    ) -> str:
        """Plan a meal on a date (YYYY-MM-DD). meal_type is a meal type id from get_meal_types."""
        return _dump(
            tools.create_meal_plan(
                servings=servings,
                date=date,
                meal_type=meal_type,
                recipe_id=recipe_id,
                title=title,
                note=note,
            )
        )

    @mcp.tool(annotations=DESTRUCTIVE)
    def delete_meal_plan(id: int) -> str:
        """Delete a meal plan."""
        return _dump(tools.delete_meal_plan(id=id))

    @mcp.tool(annotations=READ_ONLY)
    def get_meal_types() -> str:
        """List meal types (breakfast, lunch, ...)."""
        return _dump(tools.get_meal_types())

    # ── Cook log ─────────────────────────────────────────────────────

    @mcp.tool(annotations=READ_ONLY)
    def get_cook_log(recipe_id: int | None = None, days_back: int = 30) -> str:
        """Get cooking history for the last days_back days."""
        return _dump(tools.get_cook_log(recipe_id=recipe_id, days_back=days_back))

    @mcp.tool(annotations=WRITES)
    def log_cooked_recipe(
        recipe_id: int,
        servings: int = 1,
        rating: int | None = None,
        comment: str | None = None,
    ) -> str:
        """Record that a recipe was cooked. rating is 1-5."""
        return _dump(
            tools.log_cooked_recipe(recipe_id=recipe_id, servings=servings, rating=rating, comment=comment)
        )

    @mcp.tool(annotations=READ_ONLY)
    def suggest_from_inventory(mode: str = "maximum-use", days_until_expiry: int = 3) -> str:
        """Suggest recipes that use what is on hand. mode is "maximum-use" or "expiring"."""
        return _dump(tools.suggest_from_inventory(mode=mode, days_until_expiry=days_until_expiry))

    return mcp
