"""Text "contains" predicates built from resolved field descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .fields import FieldDescriptor


def fold(value: str, *, case_sensitive: bool) -> str:
    # lower(), not casefold(): matches Postgres ILIKE ("STRASSE" does not match "straße")
    return value if case_sensitive else value.lower()


@dataclass(frozen=True)
class ContainsPredicate:
    """Substring match on one text field.

    Callable on in-memory records; storage adapters read `descriptor`,
    `needle` and `case_sensitive` to translate it (e.g. into LIKE/ILIKE).
    """

    descriptor: FieldDescriptor
    needle: str
    case_sensitive: bool = False

    def __call__(self, record: Any) -> bool:
        value = self.descriptor.get(record)
        if value is None:
            return False
        return fold(self.needle, case_sensitive=self.case_sensitive) in fold(str(value), case_sensitive=self.case_sensitive)


def build_contains(
    descriptor: Optional[FieldDescriptor],
    value: Optional[str],
    *,
    case_sensitive: bool = False,
) -> Optional[ContainsPredicate]:
    """Return a contains-predicate, or None when filtering is inapplicable.

    Inapplicable means: unresolved field, non-text field, or blank (empty or
    whitespace-only) text.
    Callers skip the filter step in that case; it is never an error.
    """
    if descriptor is None or not descriptor.text_filterable:
        return None
    if value is None or not value.strip():
        return None
    return ContainsPredicate(descriptor=descriptor, needle=value, case_sensitive=case_sensitive)


__all__ = ["ContainsPredicate", "build_contains", "fold"]
