"""
Contains-predicates and orderings built from field descriptors.

Covers:
- inapplicable filters (non-text field, blank value) yield None
- case policy: Unicode case folding by default, exact when configured
- stable sorting in both directions with >= 3 equal keys
- None placement and direction normalization
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

import pytest

from lms.querying.fields import FieldRegistry
from lms.querying.ordering import ASC, DESC, build_order, normalize_direction
from lms.querying.predicates import build_contains


@dataclass
class _Item:
    key: str
    name: Optional[str] = None
    rank: int = 0
    when: Optional[datetime] = None
    ref: Optional[UUID] = None


REG = FieldRegistry()
REG.register(_Item)


def _d(name: str):
    return REG.resolve(_Item, name)


def test_build_contains_inapplicable_cases():
    assert build_contains(None, "x") is None
    assert build_contains(_d("rank"), "1") is None
    assert build_contains(_d("name"), None) is None
    assert build_contains(_d("name"), "   ") is None


def test_contains_ignores_case_by_default():
    pred = build_contains(_d("name"), "STRASSE")
    assert pred(_Item("b", name="Hauptstrasse"))
    assert not pred(_Item("c", name="Weg"))


def test_contains_lowercases_like_ilike_without_full_case_folding():
    # "ß" lower-cases to itself, so "STRASSE" must not match "straße" (same as ILIKE)
    assert not build_contains(_d("name"), "STRASSE")(_Item("a", name="Hauptstraße 1"))
    assert build_contains(_d("name"), "STRAßE")(_Item("a", name="Hauptstraße 1"))
    assert build_contains(_d("name"), "ÄPFEL")(_Item("a", name="äpfel"))


def test_contains_never_matches_none_values():
    pred = build_contains(_d("name"), "a")
    assert not pred(_Item("a", name=None))


def test_contains_case_sensitive_policy():
    pred = build_contains(_d("name"), "Alg", case_sensitive=True)
    assert pred(_Item("a", name="Algebra"))
    assert not pred(_Item("b", name="algebra"))


@pytest.mark.parametrize("raw,expected", [("desc", DESC), ("DESC", DESC), (" Desc ", DESC), ("asc", ASC), ("down", ASC), (None, ASC), ("", ASC)])
def test_normalize_direction(raw, expected):
    assert normalize_direction(raw) == expected


def test_build_order_skips_unsortable_or_unknown():
    assert build_order(None, ASC) is None


def test_sort_is_stable_ascending_and_descending():
    rows = [
        _Item("a", rank=2),
        _Item("b", rank=1),
        _Item("c", rank=2),
        _Item("d", rank=1),
        _Item("e", rank=2),
    ]
    asc = build_order(_d("rank"), "asc").apply(rows)
    assert [r.key for r in asc] == ["b", "d", "a", "c", "e"]
    desc = build_order(_d("rank"), "desc").apply(rows)
    assert [r.key for r in desc] == ["a", "c", "e", "b", "d"]


def test_none_sorts_first_ascending_and_last_descending():
    rows = [_Item("a", when=datetime(2024, 5, 1)), _Item("b"), _Item("c", when=datetime(2024, 1, 1))]
    asc = build_order(_d("when"), "asc").apply(rows)
    assert [r.key for r in asc] == ["b", "c", "a"]
    desc = build_order(_d("when"), "desc").apply(rows)
    assert [r.key for r in desc] == ["a", "c", "b"]


def test_text_sort_is_ordinal():
    rows = [_Item("1", name="b"), _Item("2", name="B"), _Item("3", name="a")]
    assert [r.name for r in build_order(_d("name"), "asc").apply(rows)] == ["B", "a", "b"]


def test_uuid_sort_is_deterministic_by_bytes():
    low, high = UUID(int=1), UUID(int=2 ** 120)
    rows = [_Item("h", ref=high), _Item("l", ref=low)]
    assert [r.key for r in build_order(_d("ref"), "asc").apply(rows)] == ["l", "h"]
