"""
Page slicing and pagination metadata.

Contract:
    `paginate(source, params)` counts the whole source first, then takes
    `page_size` rows after skipping `(page_number - 1) * page_size`. A page past
    the end yields no items but still reports the true totals.

Permissions:
    None. Callers pass sources that are already narrowed to what the caller
    may see; counts are therefore never computed over hidden rows.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, TypeVar, Union

from .source import Queryable

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class PagingParameters:
    page_number: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        # Upstream validation rejects these; reaching here is a programming error.
        if isinstance(self.page_number, bool) or int(self.page_number) < 1:
            raise ValueError("invalid_page_number")
        if isinstance(self.page_size, bool) or int(self.page_size) < 1:
            raise ValueError("invalid_page_size")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


@dataclass(frozen=True)
class PaginationMetadata:
    total_items: int
    current_page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_pages", math.ceil(self.total_items / self.page_size) if self.total_items else 0)

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "pageSize": self.page_size,
            "hasPreviousPage": self.has_previous_page,
            "hasNextPage": self.has_next_page,
        }


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    items: List[T]
    metadata: PaginationMetadata

    def map(self, func: Callable[[T], U]) -> "PaginatedResult[U]":
        return PaginatedResult(items=[func(it) for it in self.items], metadata=self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {"items": list(self.items), "metadata": self.metadata.to_dict()}


def paginate(source: Union[Queryable[T], Iterable[T]], params: PagingParameters) -> PaginatedResult[T]:
    if isinstance(source, Queryable):
        total = source.count()
        items = source.fetch(params.offset, params.page_size) if params.offset < total else []
    else:
        rows = list(source)
        total = len(rows)
        items = rows[params.offset: params.offset + params.page_size]
    return PaginatedResult(
        items=list(items),
        metadata=PaginationMetadata(total_items=total, current_page=params.page_number, page_size=params.page_size),
    )


__all__ = ["PagingParameters", "PaginationMetadata", "PaginatedResult", "paginate"]
