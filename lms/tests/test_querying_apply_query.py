"""
Query pipeline: scope-narrowed source -> text filter -> sort -> paginate.
"""
from __future__ import annotations

import logging
from uuid import uuid4

from lms.learning.models import Activity
from lms.querying import PaginatedQuery, apply_query, parse_include
from lms.querying.source import ListQueryable


def _activities(*names: str) -> list[Activity]:
    module_id, type_id = uuid4(), uuid4()
    return [Activity(id=uuid4(), module_id=module_id, activity_type_id=type_id, name=n) for n in names]


def test_page_two_of_filtered_sorted_rows():
    rows = _activities("Quiz E", "Lab", "Quiz B", "Quiz D", "Essay", "Quiz A", "Quiz C")
    query = PaginatedQuery(page=2, page_size=2, sort_by="name", sort_direction="asc", filter_by="name", filter="quiz")
    result = apply_query(ListQueryable(rows, Activity), query)
    assert [a.name for a in result.items] == ["Quiz C", "Quiz D"]
    assert result.metadata.to_dict() == {
        "totalItems": 5,
        "totalPages": 3,
        "currentPage": 2,
        "pageSize": 2,
        "hasPreviousPage": True,
        "hasNextPage": True,
    }


def test_unknown_fields_leave_natural_order_untouched(caplog):
    rows = _activities("c", "a", "b")
    query = PaginatedQuery(sort_by="doesNotExist", filter_by="nope", filter="a", page_size=10)
    with caplog.at_level(logging.DEBUG, logger="lms.querying"):
        result = apply_query(ListQueryable(rows, Activity), query)
    assert [a.name for a in result.items] == ["c", "a", "b"]
    assert result.metadata.total_items == 3
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "lms.query.filter_skipped" in messages
    assert "lms.query.sort_skipped" in messages


def test_filter_on_non_text_field_is_skipped():
    rows = _activities("x", "y")
    query = PaginatedQuery(filter_by="start_date", filter="2024")
    assert apply_query(ListQueryable(rows, Activity), query).metadata.total_items == 2


def test_sort_descending_and_field_name_case():
    rows = _activities("b", "c", "a")
    result = apply_query(ListQueryable(rows, Activity), PaginatedQuery(sort_by="NAME", sort_direction="DESC"))
    assert [a.name for a in result.items] == ["c", "b", "a"]


def test_case_sensitive_filter_when_configured():
    rows = _activities("Quiz", "quiz")
    query = PaginatedQuery(filter_by="name", filter="Quiz")
    assert apply_query(ListQueryable(rows, Activity), query).metadata.total_items == 2
    assert apply_query(ListQueryable(rows, Activity), query, case_sensitive=True).metadata.total_items == 1


def test_parse_include_trims_and_lowers():
    assert parse_include(" Modules, progress ,,PARTICIPANTS") == frozenset({"modules", "progress", "participants"})
    assert parse_include(None) == frozenset()
    assert PaginatedQuery(include="Progress").wants("progress")
