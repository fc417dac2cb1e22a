"""Generic pagination helpers for API responses."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class Page(BaseModel, Generic[T]):
    data: list[T]
    meta: PaginationMeta


def paginate(items: list[T], limit: int, offset: int) -> Page[T]:
    """Slice ``items`` and wrap the window in a :class:`Page`."""
    total = len(items)
    window = items[offset:offset + limit]
    meta = PaginationMeta(
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + len(window)) < total,
    )
    return Page[T](data=window, meta=meta)
