"""Pagination helpers for Tandoor's page/next/previous/results envelope."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from tandoor_mcp.models.common import Page
from tandoor_mcp.utils.errors import RemoteCallError, RemoteFailure

M = TypeVar("M", bound=BaseModel)


def parse_page(data: Any, model: type[M]) -> Page[M]:
    """Normalize a collection response (envelope or bare array) into a Page."""
    try:
        return Page[model].model_validate(data if data is not None else [])  # type: ignore[valid-type]
    except ValidationError as e:
        raise RemoteCallError(
            RemoteFailure.MALFORMED_RESPONSE, f"Invalid {model.__name__} list response: {e}"
        ) from e


def parse_item(data: Any, model: type[M]) -> M:
    """Validate a single object response."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteCallError(
            RemoteFailure.MALFORMED_RESPONSE, f"Invalid {model.__name__} response: {e}"
        ) from e


def paginate(
    fetch_fn: Callable[[dict[str, Any]], Any],
    params: dict[str, Any],
    max_items: int | None = None,
) -> list[Any]:
    """Collect raw results across pages by following the ``next`` link.

    Args:
        fetch_fn: A callable that takes query params and returns a response body.
        params: The initial query params; ``page`` is advanced in place.
        max_items: Stop once this many results have been collected.

    Returns:
        All results concatenated across pages (truncated to max_items).
    """
    all_results: list[Any] = []
    params.setdefault("page", 1)

    while True:
        response = fetch_fn(params)
        if isinstance(response, list):
            all_results.extend(response)
            break

        all_results.extend(response.get("results", []))
        if max_items is not None and len(all_results) >= max_items:
            break
        if not response.get("next"):
            break
        params["page"] += 1

    if max_items is not None:
        return all_results[:max_items]
    return all_results
