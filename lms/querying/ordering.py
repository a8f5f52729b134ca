"""
Orderings built from resolved field descriptors.

Behavior:
    - Direction is normalized case-insensitively; anything but "desc" is "asc".
    - Keys are total: `None` sorts first ascending (last descending), enums by
      value, UUIDs by their bytes, everything else by its natural order.
    - Sorting is stable in both directions (Python's `sorted` keeps the input
      order of equal keys even with `reverse=True`).
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
from uuid import UUID

from .fields import FieldDescriptor

ASC = "asc"
DESC = "desc"


def normalize_direction(direction: Optional[str]) -> str:
    if isinstance(direction, str) and direction.strip().lower() == DESC:
        return DESC
    return ASC


def _comparable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, UUID):
        return value.bytes
    return value


@dataclass(frozen=True)
class SortOrder:
    descriptor: FieldDescriptor
    direction: str = ASC

    @property
    def descending(self) -> bool:
        return self.direction == DESC

    def key(self, record: Any) -> tuple:
        value = self.descriptor.get(record)
        if value is None:
            return (0,)
        return (1, _comparable(value))

    def apply(self, rows: Iterable[Any]) -> List[Any]:
        return sorted(rows, key=self.key, reverse=self.descending)


def build_order(descriptor: Optional[FieldDescriptor], direction: Optional[str] = ASC) -> Optional[SortOrder]:
    """Return a SortOrder, or None when the field cannot be ordered."""
    if descriptor is None or not descriptor.sortable:
        return None
    return SortOrder(descriptor=descriptor, direction=normalize_direction(direction))


__all__ = ["ASC", "DESC", "SortOrder", "build_order", "normalize_direction"]
