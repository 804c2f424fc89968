"""Tool implementations exposed over MCP.

Each public method of TandoorTools is one tool. Methods return plain dicts;
failures in the Tandoor taxonomy come back as structured error payloads
instead of raising, so a failed call never takes the server down.
"""

from __future__ import annotations

import datetime as dt
import functools
import logging
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.config import SuggestionPolicy
from tandoor_mcp.models.meal_plans import CookLog, CreateCookLogRequest, CreateMealPlanRequest, MealPlan
from tandoor_mcp.models.recipes import CreateRecipeRequest, CreateStepRequest, NameRef, Recipe
from tandoor_mcp.models.shopping import (
    CreateShoppingListEntryRequest,
    ShoppingListEntry,
    UpdateShoppingListEntryRequest,
)
from tandoor_mcp.models.tools import PantryItem, ShoppingItem
from tandoor_mcp.services.catalog import CatalogService
from tandoor_mcp.services.foods import FoodService
from tandoor_mcp.services.meal_plans import CookLogService, MealPlanService
from tandoor_mcp.services.recipes import RecipeService
from tandoor_mcp.services.shopping import ShoppingListService
from tandoor_mcp.services.suggestions import SuggestionService
from tandoor_mcp.utils.errors import InvalidArgumentError, TandoorError, error_payload

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Cook log lookback cap (about a century)
MAX_DAYS_BACK = 36500


def tool_errors(fn: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Turn a TandoorError raised by a tool into its error payload."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            return fn(*args, **kwargs)
        except TandoorError as e:
            logger.error(f"{fn.__name__} failed: [{e.code}] {e.message}")
            return error_payload(e)

    return wrapper


def parse_day(value: str, name: str = "date") -> dt.date:
    """Parse a YYYY-MM-DD argument."""
    try:
        return dt.datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Invalid {name} '{value}': expected YYYY-MM-DD") from e


def _item_error(key: str, value: Any, error: TandoorError) -> dict[str, Any]:
    return {key: value, "code": error.code, "message": error.message}


def _parse_item(model: type[M], raw: Any) -> M:
    """Validate one list argument item, reporting failures as InvalidArgumentError."""
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc'])) or 'item'}: {err['msg']}" for err in e.errors())
        raise InvalidArgumentError(f"Invalid item {raw!r}: {problems}") from e


# ── Serializers ──────────────────────────────────────────────────────

def _recipe_summary(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "name": recipe.name,
        "description": recipe.description,
        "total_time": recipe.total_time,
        "servings": recipe.servings,
        "keywords": recipe.keyword_names,
        "created": recipe.created_at,
        "updated": recipe.updated_at,
    }


def _entry_dict(entry: ShoppingListEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "food": entry.food.name,
        "amount": entry.amount,
        "unit": entry.unit_name,
        "checked": entry.checked,
        "available": entry.food.food_onhand,
        "created": entry.created_at,
        "completed": entry.completed_at,
    }


def _meal_plan_dict(plan: MealPlan) -> dict[str, Any]:
    return {
        "id": plan.id,
        "date": plan.day,
        "meal_type": plan.meal_type.name,
        "recipe_id": plan.recipe.id if plan.recipe else None,
        "recipe_name": plan.recipe.name if plan.recipe else None,
        "title": plan.title,
        "servings": plan.servings,
        "note": plan.note,
    }


def _cook_log_dict(entry: CookLog) -> dict[str, Any]:
    return {
        "id": entry.id,
        "recipe_id": entry.recipe_id,
        "recipe_name": entry.recipe_name,
        "servings": entry.servings,
        "rating": entry.rating,
        "comment": entry.comment,
        "created": entry.created_at,
        "date_cooked": entry.created_at.strftime("%Y-%m-%d") if entry.created_at else None,
    }


class TandoorTools:
    """The tool surface, backed by one TandoorClient."""

    def __init__(self, client: TandoorClient, policy: SuggestionPolicy | None = None) -> None:
        self._client = client
        self.recipes = RecipeService(client)
        self.foods = FoodService(client)
        self.catalog = CatalogService(client)
        self.shopping = ShoppingListService(client)
        self.meal_plans = MealPlanService(client)
        self.cook_log = CookLogService(client)
        self.suggestions = SuggestionService(client, policy)

    # ── Recipes ──────────────────────────────────────────────────────

    @tool_errors
    def search_recipes(self, query: str | None = None, limit: int | None = None) -> dict[str, Any]:
        if limit is not None and limit < 1:
            raise InvalidArgumentError("limit must be at least 1")
        page = self.recipes.search(query, limit=limit)
        matching = f" matching '{query}'" if query else ""
        return {
            "recipes": [_recipe_summary(r) for r in page.results],
            "total_count": page.count,
            "search_interpretation": f"Found {page.count} recipes{matching}",
        }

    @tool_errors
    def get_recipe_details(self, id: int, servings: int | None = None) -> dict[str, Any]:
        if servings is not None and servings < 1:
            raise InvalidArgumentError("servings must be at least 1")
        recipe = self.recipes.get(id)

        factor = 1.0
        if servings is not None and recipe.servings:
            factor = servings / recipe.servings

        ingredients = [
            {
                "food": ing.food.name if ing.food else None,
                "amount": ing.amount * factor,
                "unit": ing.unit.name if ing.unit else None,
                "note": ing.note,
                "is_header": ing.is_header,
                "no_amount": ing.no_amount,
            }
            for ing in recipe.ingredients()
        ]
        instructions = [
            f"{step.name}: {step.instruction}" if step.name else step.instruction
            for step in recipe.steps
        ]

        return {
            "id": recipe.id,
            "name": recipe.name,
            "description": recipe.description,
            "instructions": instructions,
            "ingredients": ingredients,
            "servings": servings or recipe.servings or 1,
            "working_time": recipe.working_time,
            "waiting_time": recipe.waiting_time,
            "total_time": recipe.total_time,
            "keywords": recipe.keyword_names,
            "nutrition": recipe.nutrition.model_dump() if recipe.nutrition else None,
            "created": recipe.created_at,
            "updated": recipe.updated_at,
            "scaling_applied": factor != 1.0,
        }

    @tool_errors
    def create_recipe(
        self,
        name: str,
        description: str | None = None,
        instructions: str | None = None,
        servings: int | None = None,
        prep_time: int | None = None,
        cook_time: int | None = None,
        keywords: list[str] | None = None,
    ) -> dict[str, Any]:
        if not name.strip():
            raise InvalidArgumentError("Recipe name must not be empty")

        request = CreateRecipeRequest(
            name=name,
            description=description,
            servings=servings,
            working_time=prep_time or 0,
            waiting_time=cook_time or 0,
            keywords=[NameRef(name=k) for k in keywords or []],
            steps=[CreateStepRequest(instruction=instructions)] if instructions else [],
        )
        recipe = self.recipes.create(request)
        return {
            "id": recipe.id,
            "name": recipe.name,
            "description": recipe.description,
            "servings": recipe.servings,
            "working_time": recipe.working_time,
            "waiting_time": recipe.waiting_time,
            "keywords": recipe.keyword_names,
            "created": recipe.created_at,
            "success": True,
            "message": "Recipe created successfully",
        }

    @tool_errors
    def import_recipe_from_url(self, url: str) -> dict[str, Any]:
        if not url.startswith(("http://", "https://")):
            raise InvalidArgumentError(f"Not an http(s) URL: '{url}'")
        recipe = self.recipes.import_from_url(url)
        return {
            "id": recipe.id,
            "name": recipe.name,
            "description": recipe.description,
            "imported_from": url,
            "success": True,
            "message": "Recipe imported successfully",
        }

    # ── Foods & pantry ───────────────────────────────────────────────

    @tool_errors
    def search_foods(self, query: str, limit: int | None = None) -> dict[str, Any]:
        if limit is not None and limit < 1:
            raise InvalidArgumentError("limit must be at least 1")
        page = self.foods.search(query, limit=limit)
        return {
            "foods": [
                {
                    "id": food.id,
                    "name": food.name,
                    "plural_name": food.plural_name,
                    "description": food.description,
                    "food_onhand": food.food_onhand,
                    "supermarket_category": food.supermarket_category,
                }
                for food in page.results
            ],
            "total_count": page.count,
            "query": query,
        }

    @tool_errors
    def update_pantry(self, items: list[PantryItem | dict[str, Any]]) -> dict[str, Any]:
        """Mark foods as on hand or not. Failures are reported per item."""
        updated: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []

        for raw in items:
            try:
                item = _parse_item(PantryItem, raw)
            except InvalidArgumentError as e:
                errors.append(_item_error("food", raw, e))
                continue
            try:
                food = self.foods.find(item.food)
                if food is None:
                    errors.append({
                        "food": item.food,
                        "code": "NOT_FOUND",
                        "message": "Food not found",
                        "suggestion": "Try creating the food first or use a different name",
                    })
                    continue
                result = self.foods.set_on_hand(food.id, item.available)
            except TandoorError as e:
                errors.append(_item_error("food", item.food, e))
                continue
            updated.append({
                "id": result.id,
                "name": result.name,
                "available": result.food_onhand,
                "amount": item.amount,
                "status": "updated",
            })

        return {
            "updated": updated,
            "errors": errors,
            "summary": f"Updated {len(updated)} items, {len(errors)} errors",
        }

    # ── Catalog ──────────────────────────────────────────────────────

    @tool_errors
    def get_keywords(self) -> dict[str, Any]:
        page = self.catalog.keywords()
        return {
            "keywords": [
                {"id": k.id, "name": k.name, "description": k.description} for k in page.results
            ],
            "total_count": page.count,
        }

    @tool_errors
    def get_units(self) -> dict[str, Any]:
        page = self.catalog.units()
        return {
            "units": [
                {
                    "id": u.id,
                    "name": u.name,
                    "plural_name": u.plural_name,
                    "description": u.description,
                    "base_unit": u.base_unit,
                    "type": u.type,
                }
                for u in page.results
            ],
            "total_count": page.count,
        }

    # ── Shopping list ────────────────────────────────────────────────

    @tool_errors
    def get_shopping_list(self, format: str = "flat") -> dict[str, Any]:
        if format not in ("flat", "grouped"):
            raise InvalidArgumentError(f"Unknown format '{format}': use 'flat' or 'grouped'")
        page = self.shopping.list()
        items = [_entry_dict(e) for e in page.results]

        if format == "grouped":
            return {
                "unchecked_items": [i for i in items if not i["checked"]],
                "checked_items": [i for i in items if i["checked"]],
                "total_items": page.count,
                "format": "grouped",
            }
        return {"items": items, "total_items": page.count, "format": "flat"}

    @tool_errors
    def add_to_shopping_list(
        self,
        items: list[ShoppingItem | dict[str, Any]] | None = None,
        request: str | None = None,
    ) -> dict[str, Any]:
        """Add items by food name.

        One resolved item is added with a single POST, several with one bulk
        POST. Names that match no food are reported in ``errors``.
        """
        if not items:
            if request:
                return {
                    "message": "Free-text requests are not interpreted",
                    "request": request,
                    "suggestion": "Use the structured 'items' parameter with an array of {name, amount} objects",
                }
            raise InvalidArgumentError("Provide either an 'items' array or 'request' text")

        requests: list[CreateShoppingListEntryRequest] = []
        errors: list[dict[str, Any]] = []

        for raw in items:
            try:
                item = _parse_item(ShoppingItem, raw)
            except InvalidArgumentError as e:
                errors.append(_item_error("food", raw, e))
                continue
            try:
                food = self.foods.find(item.name)
            except TandoorError as e:
                errors.append(_item_error("food", item.name, e))
                continue
            if food is None:
                errors.append({
                    "food": item.name,
                    "code": "NOT_FOUND",
                    "message": "Food not found",
                    "suggestion": "Try creating the food first or use a different name",
                })
                continue
            requests.append(CreateShoppingListEntryRequest(food=food.id, amount=item.amount))

        added: list[ShoppingListEntry] = []
        try:
            if len(requests) == 1:
                added.append(self.shopping.add(requests[0]))
            elif requests:
                added.extend(self.shopping.add_bulk(requests))
        except TandoorError as e:
            errors.append(_item_error("food", None, e))

        return {
            "added": [
                {
                    "id": e.id,
                    "food": e.food.name,
                    "amount": e.amount,
                    "unit": e.unit_name,
                    "status": "added",
                }
                for e in added
            ],
            "errors": errors,
            "summary": f"Added {len(added)} items, {len(errors)} errors",
        }

    @tool_errors
    def update_shopping_item(
        self,
        id: int,
        amount: float | None = None,
        checked: bool | None = None,
    ) -> dict[str, Any]:
        if amount is None and checked is None:
            raise InvalidArgumentError("Nothing to update: pass amount and/or checked")
        if amount is not None and amount <= 0:
            raise InvalidArgumentError("amount must be positive")
        entry = self.shopping.update(id, UpdateShoppingListEntryRequest(amount=amount, checked=checked))
        return {**_entry_dict(entry), "success": True}

    @tool_errors
    def remove_shopping_item(self, id: int) -> dict[str, Any]:
        self.shopping.delete(id)
        return {"deleted": {"id": id}, "success": True, "message": "Shopping list item removed"}

    @tool_errors
    def check_shopping_items(self, items: list[int | str]) -> dict[str, Any]:
        """Check entries off by id, or by case-insensitive food-name substring."""
        updated: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        current: list[ShoppingListEntry] | None = None

        for item in items:
            if isinstance(item, int) and not isinstance(item, bool):
                key, entry_id = "item_id", item
            else:
                key, needle = "item_name", str(item).lower()
                try:
                    if current is None:
                        current = self.shopping.list().results
                except TandoorError as e:
                    errors.append(_item_error(key, item, e))
                    continue
                match = next((e for e in current if needle in e.food.name.lower()), None)
                if match is None:
                    errors.append({
                        key: item,
                        "code": "NOT_FOUND",
                        "message": "Item not found in shopping list",
                    })
                    continue
                entry_id = match.id

            try:
                entry = self.shopping.check(entry_id)
            except TandoorError as e:
                errors.append(_item_error(key, item, e))
                continue
            updated.append({
                "id": entry.id,
                "food": entry.food.name,
                "checked": entry.checked,
                "status": "checked",
            })

        return {
            "updated": updated,
            "errors": errors,
            "summary": f"Checked {len(updated)} items, {len(errors)} errors",
        }

    @tool_errors
    def clear_shopping_list(self) -> dict[str, Any]:
        """Delete checked entries and mark their foods as on hand."""
        removed: list[dict[str, Any]] = []
        pantry_updates: list[str] = []
        errors: list[dict[str, Any]] = []

        for entry in self.shopping.list().results:
            if not entry.checked:
                continue
            try:
                self.shopping.delete(entry.id)
            except TandoorError as e:
                errors.append(_item_error("food", entry.food.name, e))
                continue
            removed.append({
                "id": entry.id,
                "food": entry.food.name,
                "amount": entry.amount,
                "unit": entry.unit_name,
            })
            try:
                self.foods.set_on_hand(entry.food.id, True)
            except TandoorError as e:
                errors.append(_item_error("food", entry.food.name, e))
                continue
            pantry_updates.append(entry.food.name)

        return {
            "removed_items": removed,
            "pantry_updates": pantry_updates,
            "errors": errors,
            "summary": (
                f"Removed {len(removed)} checked items, "
                f"updated pantry for {len(pantry_updates)} items"
            ),
        }

    # ── Meal planning ────────────────────────────────────────────────

    @tool_errors
    def get_meal_plans(
        self,
        from_date: str,
        to_date: str,
        meal_type: str | None = None,
    ) -> dict[str, Any]:
        start = parse_day(from_date, "from_date")
        end = parse_day(to_date, "to_date")
        if end < start:
            raise InvalidArgumentError("to_date must not be before from_date")

        plans = self.meal_plans.list(start, end).results
        if meal_type:
            plans = [p for p in plans if p.meal_type.name.lower() == meal_type.lower()]

        return {
            "meal_plans": [_meal_plan_dict(p) for p in plans],
            "total_count": len(plans),
            "date_range": f"{from_date} to {to_date}",
            "meal_type_filter": meal_type,
        }

    @tool_errors
    def create_meal_plan(
        self,
        servings: int,
        date: str,
        meal_type: int,
        recipe_id: int | None = None,
        title: str | None = None,
        note: str | None = None,
    ) -> dict[str, Any]:
        day = parse_day(date)
        if servings < 1:
            raise InvalidArgumentError("servings must be at least 1")
        if recipe_id is None and not title:
            raise InvalidArgumentError("Provide a recipe_id or a title")

        plan = self.meal_plans.create(
            CreateMealPlanRequest(
                recipe=recipe_id,
                title=title,
                servings=servings,
                from_date=day,
                meal_type=meal_type,
                note=note,
            )
        )
        return {**_meal_plan_dict(plan), "success": True, "message": "Meal plan created successfully"}

    @tool_errors
    def delete_meal_plan(self, id: int) -> dict[str, Any]:
        self.meal_plans.delete(id)
        return {"deleted": {"id": id}, "success": True, "message": "Meal plan deleted successfully"}

    @tool_errors
    def get_meal_types(self) -> dict[str, Any]:
        page = self.meal_plans.meal_types()
        return {
            "meal_types": [
                {"id": t.id, "name": t.name, "order": t.order, "icon": t.icon, "color": t.color}
                for t in page.results
            ],
            "total_count": page.count,
        }

    # ── Cook log ─────────────────────────────────────────────────────

    @tool_errors
    def get_cook_log(self, recipe_id: int | None = None, days_back: int = 30) -> dict[str, Any]:
        if not 0 <= days_back <= MAX_DAYS_BACK:
            raise InvalidArgumentError(f"days_back must be between 0 and {MAX_DAYS_BACK}, got {days_back}")
        page = self.cook_log.list(recipe_id=recipe_id, days_back=days_back)
        return {
            "cook_log": [_cook_log_dict(e) for e in page.results],
            "total_count": page.count,
            "days_back": days_back,
            "recipe_filter": recipe_id,
        }

    @tool_errors
    def log_cooked_recipe(
        self,
        recipe_id: int,
        servings: int = 1,
        rating: int | None = None,
        comment: str | None = None,
    ) -> dict[str, Any]:
        if rating is not None and not 1 <= rating <= 5:
            raise InvalidArgumentError(f"rating must be between 1 and 5, got {rating}")
        if servings < 1:
            raise InvalidArgumentError("servings must be at least 1")

        entry = self.cook_log.log(
            CreateCookLogRequest(recipe=recipe_id, servings=servings, rating=rating, comment=comment)
        )
        return {**_cook_log_dict(entry), "success": True, "message": "Recipe cooking logged successfully"}

    # ── Suggestions ──────────────────────────────────────────────────

    @tool_errors
    def suggest_from_inventory(self, mode: str = "maximum-use", days_until_expiry: int = 3) -> dict[str, Any]:
        """Recipes ranked by how much of the pantry they use.

        ``days_until_expiry`` is echoed back; Tandoor tracks no expiry dates.
        """
        pantry = self.suggestions.pantry()
        if not pantry:
            return {
                "suggestions": [],
                "message": "No ingredients found in pantry. Update your inventory first.",
                "mode": mode,
            }

        matches = self.suggestions.suggest(mode, pantry=pantry)
        return {
            "suggestions": [m.to_dict(mode) for m in matches],
            "available_ingredients": [f.name for f in pantry],
            "mode": mode,
            "days_until_expiry": days_until_expiry,
            "total_available": len(pantry),
            "message": (
                f"Found {len(matches)} recipe suggestions using your "
                f"{len(pantry)} available ingredients"
            ),
        }
