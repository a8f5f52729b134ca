"""
Field descriptors for runtime-named sorting and filtering.

Why:
    List endpoints accept `sortBy` / `filterBy` as free text. Instead of probing
    record types per request, each record type registers its readable fields
    once; a request then only does a dictionary lookup. An unknown name is a
    plain miss (`None`), which callers treat as "ignore this clause".

Behavior:
    - Descriptors come from dataclass fields and their resolved type hints.
    - `Optional[X]` unwraps to `X` and marks the descriptor as nullable.
    - Names starting with an underscore are private and never exposed.
    - Lookup is case-insensitive (Unicode case folding) and whitespace-trimmed.
    - snake_case fields also answer to their camelCase spelling (`start_date`
      and `startDate`), matching the JSON field names.
"""
from __future__ import annotations

import dataclasses
import enum
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional
from uuid import UUID

_SORTABLE_TYPES = (bool, int, float, Decimal, str, datetime, date, UUID)


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    value_type: type
    column: str
    nullable: bool = False
    sortable: bool = False
    text_filterable: bool = False

    def get(self, record: Any) -> Any:
        return getattr(record, self.name)


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(hint))
        if len(args) == 1:
            return args[0], nullable
        return object, nullable
    return hint, False


def _is_sortable(value_type: Any) -> bool:
    if not isinstance(value_type, type):
        return False
    if issubclass(value_type, enum.Enum):
        return True
    return issubclass(value_type, _SORTABLE_TYPES)


def _is_text(value_type: Any) -> bool:
    # str-valued enums are compared by identity, not substring
    return isinstance(value_type, type) and issubclass(value_type, str) and not issubclass(value_type, enum.Enum)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def describe(record_type: type, *, columns: Optional[Mapping[str, str]] = None, exclude: Iterable[str] = ()) -> Dict[str, FieldDescriptor]:
    """Build descriptors for the public dataclass fields of `record_type`.

    Parameters:
        columns: optional field-name -> storage column overrides.
        exclude: field names that must stay invisible to callers.
    """
    if not dataclasses.is_dataclass(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass")
    hints = typing.get_type_hints(record_type)
    columns = dict(columns or {})
    skipped = set(exclude)
    out: Dict[str, FieldDescriptor] = {}
    for f in dataclasses.fields(record_type):
        if f.name.startswith("_") or f.name in skipped:
            continue
        value_type, nullable = _unwrap_optional(hints.get(f.name, Any))
        descriptor = FieldDescriptor(
            name=f.name,
            value_type=value_type if isinstance(value_type, type) else object,
            column=columns.get(f.name, f.name),
            nullable=nullable,
            sortable=_is_sortable(value_type),
            text_filterable=_is_text(value_type),
        )
        out[f.name.casefold()] = descriptor
        out.setdefault(_camel(f.name).casefold(), descriptor)
    return out


class FieldRegistry:
    """Per-record-type field descriptors, built once at startup."""

    def __init__(self) -> None:
        self._by_type: Dict[type, Dict[str, FieldDescriptor]] = {}

    def register(
        self,
        record_type: type,
        *,
        columns: Optional[Mapping[str, str]] = None,
        exclude: Iterable[str] = (),
    ) -> type:
        self._by_type[record_type] = describe(record_type, columns=columns, exclude=exclude)
        return record_type

    def is_registered(self, record_type: type) -> bool:
        return record_type in self._by_type

    def descriptors(self, record_type: type) -> list[FieldDescriptor]:
        unique = {d.name: d for d in self._by_type.get(record_type, {}).values()}
        return list(unique.values())

    def resolve(self, record_type: type, field_name: Optional[str]) -> Optional[FieldDescriptor]:
        """Return the descriptor for `field_name`, or None when it does not resolve."""
        if not field_name:
            return None
        key = field_name.strip().casefold()
        if not key:
            return None
        return self._by_type.get(record_type, {}).get(key)


REGISTRY = FieldRegistry()


def register(record_type: type | None = None, *, columns: Optional[Mapping[str, str]] = None, exclude: Iterable[str] = ()):
    """Register a dataclass with the default registry; usable as a decorator."""

    def _apply(cls: type) -> type:
        return REGISTRY.register(cls, columns=columns, exclude=exclude)

    if record_type is None:
        return _apply
    return _apply(record_type)


def resolve(record_type: type, field_name: Optional[str]) -> Optional[FieldDescriptor]:
    return REGISTRY.resolve(record_type, field_name)


__all__ = ["FieldDescriptor", "FieldRegistry", "REGISTRY", "describe", "register", "resolve"]
