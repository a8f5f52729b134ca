"""
Paginated list queries: caller input shape and the filter -> sort -> page pipeline.

Why:
    Every list endpoint accepts the same query string. Keeping parsing and the
    pipeline in one place guarantees the step order: the source handed in is
    already scope-narrowed; then text filter, then sort, then paginate.

Security:
    `sort_by`, `filter_by`, `filter` and `include` are untrusted strings. Field
    names only ever select a registered descriptor; they never reach storage
    as text.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, TypeVar

from .fields import REGISTRY, FieldRegistry
from .ordering import ASC, build_order, normalize_direction
from .pagination import PaginatedResult, PagingParameters, paginate
from .predicates import build_contains
from .source import Queryable

logger = logging.getLogger("lms.querying")

T = TypeVar("T")


def parse_include(include: Optional[str]) -> FrozenSet[str]:
    """Split a comma-separated include list into lower-case names."""
    if not include:
        return frozenset()
    return frozenset(part.strip().lower() for part in include.split(",") if part.strip())


@dataclass(frozen=True)
class PaginatedQuery:
    page: int = 1
    page_size: int = 10
    sort_by: Optional[str] = None
    sort_direction: str = ASC
    filter: Optional[str] = None
    filter_by: Optional[str] = None
    include: Optional[str] = None

    @property
    def paging(self) -> PagingParameters:
        return PagingParameters(page_number=self.page, page_size=self.page_size)

    @property
    def direction(self) -> str:
        return normalize_direction(self.sort_direction)

    @property
    def includes(self) -> FrozenSet[str]:
        return parse_include(self.include)

    def wants(self, name: str) -> bool:
        return name.lower() in self.includes


def apply_query(
    source: Queryable[T],
    query: PaginatedQuery,
    *,
    case_sensitive: bool = False,
    registry: FieldRegistry = REGISTRY,
) -> PaginatedResult[T]:
    """Filter, sort and paginate an already scope-narrowed source.

    Unknown or inapplicable `filter_by` / `sort_by` names are skipped silently;
    the corresponding step leaves the source unchanged.
    """
    paging = query.paging
    record_type = source.record_type

    if query.filter_by and query.filter:
        descriptor = registry.resolve(record_type, query.filter_by)
        predicate = build_contains(descriptor, query.filter, case_sensitive=case_sensitive)
        if predicate is None:
            logger.debug("lms.query.filter_skipped record=%s field=%r", record_type.__name__, query.filter_by)
        else:
            source = source.where(predicate)

    if query.sort_by:
        order = build_order(registry.resolve(record_type, query.sort_by), query.sort_direction)
        if order is None:
            logger.debug("lms.query.sort_skipped record=%s field=%r", record_type.__name__, query.sort_by)
        else:
            source = source.order_by(order)

    return paginate(source, paging)


__all__ = ["PaginatedQuery", "apply_query", "parse_include"]
