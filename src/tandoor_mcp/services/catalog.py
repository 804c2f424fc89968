"""Keyword and unit listings."""

from __future__ import annotations

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.common import Page
from tandoor_mcp.models.recipes import Keyword, Unit
from tandoor_mcp.utils.pagination import parse_page


class CatalogService:
    """Service for /api/keyword/ and /api/unit/."""

    def __init__(self, client: TandoorClient) -> None:
        self._client = client

    def keywords(self, limit: int | None = None) -> Page[Keyword]:
        data = self._client.get("/keyword/", params={"page_size": limit})
        return parse_page(data, Keyword)

    def units(self, limit: int | None = None) -> Page[Unit]:
        data = self._client.get("/unit/", params={"page_size": limit})
        return parse_page(data, Unit)
