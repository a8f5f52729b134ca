"""
Paginator: metadata arithmetic, slicing and pages past the end.
"""
from __future__ import annotations

import math

import pytest

from lms.querying.pagination import PaginationMetadata, PagingParameters, paginate
from lms.querying.source import ListQueryable


@pytest.mark.parametrize("total", [0, 1, 9, 10, 11, 25])
@pytest.mark.parametrize("size", [1, 3, 10])
def test_metadata_properties(total: int, size: int):
    pages = math.ceil(total / size)
    for current in range(1, pages + 2):
        meta = PaginationMetadata(total_items=total, current_page=current, page_size=size)
        assert meta.total_pages == pages
        assert meta.has_next_page == (current < pages)
        assert meta.has_previous_page == (current > 1)


def test_empty_source_has_zero_pages_and_no_next():
    result = paginate([], PagingParameters(1, 10))
    assert result.items == []
    assert result.metadata.total_pages == 0
    assert result.metadata.has_next_page is False
    assert result.metadata.has_previous_page is False


@pytest.mark.parametrize("size", [1, 2, 3, 7])
def test_concatenated_pages_reproduce_sequence_once(size: int):
    rows = list(range(11))
    source = ListQueryable(rows, int)
    first = paginate(source, PagingParameters(1, size))
    collected = []
    for page in range(1, first.metadata.total_pages + 1):
        collected.extend(paginate(source, PagingParameters(page, size)).items)
    assert collected == rows


def test_page_beyond_end_is_empty_with_true_totals():
    result = paginate(ListQueryable(list(range(5)), int), PagingParameters(page_number=9, page_size=2))
    assert result.items == []
    assert result.metadata.to_dict() == {
        "totalItems": 5,
        "totalPages": 3,
        "currentPage": 9,
        "pageSize": 2,
        "hasPreviousPage": True,
        "hasNextPage": False,
    }


@pytest.mark.parametrize("page,size", [(0, 10), (1, 0), (-1, 5), (True, 5)])
def test_non_positive_paging_is_a_programming_error(page, size):
    with pytest.raises(ValueError):
        PagingParameters(page_number=page, page_size=size)


def test_plain_iterables_are_materialized():
    result = paginate((n for n in range(4)), PagingParameters(2, 3))
    assert result.items == [3]
    assert result.metadata.total_items == 4


def test_map_keeps_metadata():
    result = paginate([1, 2, 3], PagingParameters(1, 2)).map(lambda n: n * 10)
    assert result.items == [10, 20]
    assert result.to_dict()["metadata"]["totalItems"] == 3
