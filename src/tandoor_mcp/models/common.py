"""Shared response shapes: the collection envelope and loosely typed references."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class TandoorModel(BaseModel):
    """Base for remote DTOs. Unknown fields are ignored so API additions don't break parsing."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserRef(TandoorModel):
    """A user reference.

    Tandoor sends ``created_by`` either as an embedded user object or as a bare
    integer id. Both are normalized to this shape.
    """
    id: int
    username: str | None = None
    display_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_bare_id(cls, data: Any) -> Any:
        if isinstance(data, bool):
            return data
        if isinstance(data, int):
            return {"id": data}
        return data


class Page(TandoorModel, Generic[T]):
    """Django REST framework pagination envelope.

    A bare JSON array is accepted too and normalized to a single page.
    """
    count: int = 0
    next: str | None = None
    previous: str | None = None
    results: list[T] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"count": len(data), "next": None, "previous": None, "results": data}
        return data
