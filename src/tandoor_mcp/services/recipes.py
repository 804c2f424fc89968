"""Recipe search, retrieval, creation and import."""

from __future__ import annotations

import logging

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.common import Page
from tandoor_mcp.models.recipes import (
    CreateRecipeRequest,
    ImportRecipeRequest,
    NameRef,
    Recipe,
    UpdateRecipeKeywordsRequest,
)
from tandoor_mcp.utils.errors import RemoteCallError, RemoteFailure
from tandoor_mcp.utils.pagination import parse_item, parse_page

logger = logging.getLogger(__name__)


class RecipeService:
    """Service for /api/recipe/ and /api/recipe-from-source/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def search(
        self,
        query: str | None = None,
        limit: int | None = None,
        page: int | None = None,
    ) -> Page[Recipe]:
        """Search recipes. An empty query lists recipes."""
        logger.debug(f"Searching recipes: query={query!r}, limit={limit}, page={page}")
        data = self._client.get(
            "/recipe/",
            params={"query": query or None, "page_size": limit, "page": page},
        )
        return parse_page(data, Recipe)

    def get(self, recipe_id: int) -> Recipe:
        """Fetch one recipe with steps and ingredients."""
        data = self._client.get(
            f"/recipe/{recipe_id}/",
            not_found=f"Recipe with ID {recipe_id} not found",
        )
        return parse_item(data, Recipe)

    def create(self, request: CreateRecipeRequest) -> Recipe:
        """Create a new recipe."""
        logger.debug(f"Creating new recipe: {request.name}")
        data = self._client.post("/recipe/", body=request.model_dump(exclude_none=True))
        recipe = parse_item(data, Recipe)
        logger.info(f"Created recipe '{recipe.name}' with ID: {recipe.id}")
        return recipe

    def update_keywords(self, recipe_id: int, keywords: list[str]) -> Recipe:
        """Replace a recipe's keywords, creating unknown keywords by name."""
        request = UpdateRecipeKeywordsRequest(keywords=[NameRef(name=k) for k in keywords])
        data = self._client.patch(
            f"/recipe/{recipe_id}/",
            body=request.model_dump(),
            not_found=f"Recipe with ID {recipe_id} not found",
        )
        return parse_item(data, Recipe)

    def import_from_url(self, url: str) -> Recipe:
        """Import a recipe from an external website."""
        logger.info(f"Importing recipe from URL: {url}")
        try:
            data = self._client.post(
                "/recipe-from-source/",
                body=ImportRecipeRequest(url=url).model_dump(),
                not_found="Recipe import endpoint not available",
            )
        except RemoteCallError as e:
            if e.kind is RemoteFailure.VALIDATION:
                raise RemoteCallError(
                    RemoteFailure.VALIDATION,
                    f"Invalid URL or unsupported recipe site: {url}",
                    e.status_code,
                ) from e
            raise

        recipe = parse_item(data, Recipe)
        logger.info(f"Imported recipe '{recipe.name}' with ID: {recipe.id}")
        return recipe
