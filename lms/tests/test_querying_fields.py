"""
Field registry: runtime field names resolve to typed descriptors.

Covers:
- case-insensitive, whitespace-trimmed lookup
- unknown/empty names and unregistered types are plain misses
- capability flags derived from type hints (Optional unwrapping, enums, private fields)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

import pytest

from lms.querying.fields import FieldRegistry, describe
from lms.learning.models import Course


class _Level(str, Enum):
    LOW = "low"
    HIGH = "high"


@dataclass
class _Row:
    id: UUID
    title: str
    score: int
    level: _Level
    due: Optional[datetime] = None
    note: Optional[str] = None
    tags: Optional[list] = None
    _secret: str = "x"


@pytest.fixture
def registry() -> FieldRegistry:
    reg = FieldRegistry()
    reg.register(_Row, columns={"title": "title_text"}, exclude=("score",))
    return reg


def test_resolve_is_case_insensitive_and_trimmed(registry: FieldRegistry):
    d = registry.resolve(_Row, "  TiTlE ")
    assert d is not None
    assert d.name == "title"
    assert d.column == "title_text"


@pytest.mark.parametrize("name", [None, "", "   ", "unknown", "_secret", "score"])
def test_resolve_misses_return_none(registry: FieldRegistry, name):
    assert registry.resolve(_Row, name) is None


def test_unregistered_type_is_a_miss(registry: FieldRegistry):
    assert registry.resolve(Course, "name") is None
    assert registry.is_registered(_Row)
    assert not registry.is_registered(Course)


def test_capabilities_follow_type_hints(registry: FieldRegistry):
    title = registry.resolve(_Row, "title")
    assert title.sortable and title.text_filterable and not title.nullable

    level = registry.resolve(_Row, "level")
    assert level.sortable
    assert not level.text_filterable  # enums compare by value, not substring

    due = registry.resolve(_Row, "due")
    assert due.value_type is datetime
    assert due.nullable and due.sortable and not due.text_filterable

    note = registry.resolve(_Row, "note")
    assert note.nullable and note.text_filterable

    tags = registry.resolve(_Row, "tags")
    assert not tags.sortable and not tags.text_filterable


def test_descriptor_reads_record_value(registry: FieldRegistry):
    row = _Row(id=UUID(int=1), title="Algebra", score=3, level=_Level.LOW)
    assert registry.resolve(_Row, "title").get(row) == "Algebra"


def test_describe_rejects_non_dataclass():
    with pytest.raises(TypeError):
        describe(dict)


def test_domain_records_are_registered_at_import():
    from lms.querying.fields import resolve

    assert resolve(Course, "startDate") is resolve(Course, "start_date")
    assert resolve(Course, "start_date").nullable
    assert resolve(Course, "NAME").text_filterable


def test_camel_case_alias_and_unique_descriptors(registry: FieldRegistry):
    assert registry.resolve(_Row, "Due") is registry.resolve(_Row, "due")
    names = [d.name for d in registry.descriptors(_Row)]
    assert sorted(names) == ["due", "id", "level", "note", "tags", "title"]
