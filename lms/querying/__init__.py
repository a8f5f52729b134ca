"""Generic query engine: field registry, filters, orderings and pagination.

Re-export the public building blocks for convenient imports.
"""

from .fields import REGISTRY, FieldDescriptor, FieldRegistry, register, resolve
from .ordering import ASC, DESC, SortOrder, build_order, normalize_direction
from .pagination import PaginatedResult, PaginationMetadata, PagingParameters, paginate
from .predicates import ContainsPredicate, build_contains
from .query import PaginatedQuery, apply_query, parse_include
from .source import ListQueryable, Queryable

__all__ = [
    "ASC",
    "DESC",
    "REGISTRY",
    "ContainsPredicate",
    "FieldDescriptor",
    "FieldRegistry",
    "ListQueryable",
    "PaginatedQuery",
    "PaginatedResult",
    "PaginationMetadata",
    "PagingParameters",
    "Queryable",
    "SortOrder",
    "apply_query",
    "build_contains",
    "build_order",
    "normalize_direction",
    "paginate",
    "parse_include",
    "register",
    "resolve",
]
