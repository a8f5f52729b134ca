"""
Queryable sources: the storage-facing side of the query pipeline.

A `Queryable` is an immutable description of "rows of one record type" that
can be narrowed with a predicate, ordered, counted and sliced. Counting is
independent of slicing so pagination metadata always reflects the full
(narrowed, filtered) set.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, List, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from .ordering import SortOrder
from .predicates import ContainsPredicate

T = TypeVar("T")


@runtime_checkable
class Queryable(Protocol[T]):
    record_type: type

    def where(self, predicate: ContainsPredicate) -> "Queryable[T]":
        ...

    def order_by(self, order: SortOrder) -> "Queryable[T]":
        ...

    def count(self) -> int:
        ...

    def fetch(self, offset: int, limit: int) -> List[T]:
        ...


class ListQueryable(Generic[T]):
    """In-memory Queryable over a list; insertion order is the natural order."""

    def __init__(
        self,
        rows: Sequence[T],
        record_type: type,
        *,
        order: Optional[SortOrder] = None,
    ) -> None:
        self.record_type = record_type
        self._rows: List[T] = list(rows)
        self._order = order

    def where(self, predicate: Callable[[Any], bool]) -> "ListQueryable[T]":
        return ListQueryable([r for r in self._rows if predicate(r)], self.record_type, order=self._order)

    def order_by(self, order: SortOrder) -> "ListQueryable[T]":
        return ListQueryable(self._rows, self.record_type, order=order)

    def _ordered(self) -> List[T]:
        if self._order is None:
            return list(self._rows)
        return self._order.apply(self._rows)

    def count(self) -> int:
        return len(self._rows)

    def fetch(self, offset: int, limit: int) -> List[T]:
        return self._ordered()[offset: offset + limit]


__all__ = ["ListQueryable", "Queryable"]
