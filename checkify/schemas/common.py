"""Common schemas shared across modules."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CursorPage(BaseModel, Generic[T]):
    """One page of a cursor-paginated upstream list."""

    items: list[T]
    has_more: bool = False
    next_cursor: str | None = None


class PaginationResult(BaseModel, Generic[T]):
    """
    Result of walking a cursor-paginated list.

    was_limited is True only when the walk stopped at the configured cap
    while upstream still reported more items.
    """

    items: list[T]
    total_count: int = Field(alias="totalCount")
    was_limited: bool = Field(default=False, alias="wasLimited")

    model_config = ConfigDict(populate_by_name=True)
