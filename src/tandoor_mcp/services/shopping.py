"""Shopping list management service."""

from __future__ import annotations

import logging

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.common import Page
from tandoor_mcp.models.shopping import (
    BulkShoppingListRequest,
    CreateShoppingListEntryRequest,
    ShoppingListEntry,
    UpdateShoppingListEntryRequest,
)
from tandoor_mcp.utils.pagination import parse_item, parse_page

logger = logging.getLogger(__name__)


class ShoppingListService:
    """Service for /api/shopping-list-entry/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def list(self) -> Page[ShoppingListEntry]:
        """Current shopping list.

        Tandoor answers with either a bare array or a paginated envelope;
        both are normalized to a Page.
        """
        data = self._client.get("/shopping-list-entry/")
        entries = parse_page(data, ShoppingListEntry)
        logger.debug(f"Retrieved shopping list with {entries.count} items")
        return entries

    def add(self, request: CreateShoppingListEntryRequest) -> ShoppingListEntry:
        """Add a single entry."""
        data = self._client.post("/shopping-list-entry/", body=request.model_dump(exclude_none=True))
        return parse_item(data, ShoppingListEntry)

    def add_bulk(self, requests: list[CreateShoppingListEntryRequest]) -> list[ShoppingListEntry]:
        """Add several entries in one request."""
        logger.debug(f"Adding {len(requests)} items to shopping list in bulk")
        body = BulkShoppingListRequest(entries=requests).model_dump(exclude_none=True)
        data = self._client.post("/shopping-list-entry/bulk/", body=body)
        return parse_page(data, ShoppingListEntry).results

    def update(self, entry_id: int, request: UpdateShoppingListEntryRequest) -> ShoppingListEntry:
        """Patch amount and/or checked state of an entry."""
        data = self._client.patch(
            f"/shopping-list-entry/{entry_id}/",
            body=request.model_dump(exclude_none=True),
            not_found=f"Shopping list entry {entry_id} not found",
        )
        return parse_item(data, ShoppingListEntry)

    def check(self, entry_id: int) -> ShoppingListEntry:
        """Mark an entry as purchased."""
        return self.update(entry_id, UpdateShoppingListEntryRequest(checked=True))

    def delete(self, entry_id: int) -> None:
        """Remove an entry."""
        self._client.delete(
            f"/shopping-list-entry/{entry_id}/",
            not_found=f"Shopping list entry {entry_id} not found",
        )
