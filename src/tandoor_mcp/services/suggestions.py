"""Pantry-driven recipe suggestions.

Foods marked on hand form the pantry. Each sampled recipe is scored by the
share of its real ingredients (not headers, not amount-less garnish) whose
food is in the pantry; the mode decides the qualifying threshold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.config import SuggestionPolicy
from tandoor_mcp.models.recipes import Food, Recipe
from tandoor_mcp.services.foods import FoodService
from tandoor_mcp.services.recipes import RecipeService
from tandoor_mcp.utils.errors import RemoteCallError

logger = logging.getLogger(__name__)

MAXIMUM_USE = "maximum-use"
EXPIRING = "expiring"


@dataclass
class RecipeMatch:
    """How well one recipe fits the pantry."""
    recipe: Recipe
    matching: int = 0
    total: int = 0
    missing: list[str] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.matching / self.total * 100.0

    def to_dict(self, mode: str) -> dict[str, Any]:
        if mode == EXPIRING:
            reason = (
                f"Uses {self.percentage:.0f}% of pantry ingredients, "
                f"only {len(self.missing)} missing items"
            )
        else:
            reason = f"Uses {self.percentage:.0f}% of available ingredients"
        return {
            "recipe_id": self.recipe.id,
            "recipe_name": self.recipe.name,
            "match_percentage": self.percentage,
            "matching_ingredients": self.matching,
            "total_ingredients": self.total,
            "missing_ingredients": self.missing,
            "reason": reason,
            "total_time": self.recipe.total_time,
        }


def score_recipe(recipe: Recipe, pantry: set[str]) -> RecipeMatch:
    """Count pantry hits among a recipe's ingredients.

    ``pantry`` holds lower-cased food names.
    """
    match = RecipeMatch(recipe=recipe)
    for ingredient in recipe.ingredients():
        if ingredient.is_header or ingredient.no_amount or ingredient.food is None:
            continue
        match.total += 1
        if ingredient.food.name.lower() in pantry:
            match.matching += 1
        else:
            match.missing.append(ingredient.food.name)
    return match


def qualifies(match: RecipeMatch, mode: str, policy: SuggestionPolicy) -> bool:
    """Apply the per-mode threshold to a scored recipe."""
    if match.total == 0:
        return False
    if mode == MAXIMUM_USE:
        return match.percentage >= policy.maximum_use_threshold
    if mode == EXPIRING:
        return (
            match.percentage >= policy.expiring_threshold
            and len(match.missing) <= policy.expiring_max_missing
        )
    return match.percentage >= policy.default_threshold


class SuggestionService:
    """Suggest recipes that make the most of what is on hand."""

    def __init__(self, client: TandoorClient, policy: SuggestionPolicy | None = None) -> None:
        self._client = client
        self._policy = policy or SuggestionPolicy()
        self._foods = FoodService(client)
        self._recipes = RecipeService(client)

    @property
    def policy(self) -> SuggestionPolicy:
        return self._policy

    def pantry(self) -> list[Food]:
        return self._foods.list_on_hand(self._policy.pantry_sample_size)

    def suggest(self, mode: str = MAXIMUM_USE, pantry: list[Food] | None = None) -> list[RecipeMatch]:
        """Score a sample of recipes against the pantry.

        Returns qualifying matches, best first, capped at the policy's max_results.
        Recipes whose details cannot be fetched are skipped.
        """
        if pantry is None:
            pantry = self.pantry()
        if not pantry:
            return []

        names = {food.name.lower() for food in pantry}
        sample = self._recipes.search(limit=self._policy.recipe_sample_size).results
        logger.debug(f"Scoring {len(sample)} recipes against {len(names)} pantry foods")

        matches: list[RecipeMatch] = []
        for summary in sample:
            try:
                recipe = self._recipes.get(summary.id)
            except RemoteCallError as e:
                logger.warning(f"Skipping recipe {summary.id}: {e.message}")
                continue
            match = score_recipe(recipe, names)
            if qualifies(match, mode, self._policy):
                matches.append(match)

        matches.sort(key=lambda m: m.percentage, reverse=True)
        return matches[: self._policy.max_results]
