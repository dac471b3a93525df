from __future__ import annotations

import pytest

from utils.pagination import format_duration, paginate, truncate_label


def test_third_page_of_twenty_five() -> None:
    page = paginate(list(range(1, 26)), 3, 10)

    assert page.items == [21, 22, 23, 24, 25]
    assert page.total_pages == 3
    assert page.total_count == 25
    assert page.offset == 20
    assert page.has_prev is True
    assert page.has_next is False


@pytest.mark.parametrize("count", [0, 1, 9, 10, 11, 20, 21])
def test_page_sizes_follow_the_count(count: int) -> None:
    results = list(range(count))
    total_pages = -(-count // 10)

    for page_number in range(1, total_pages + 1):
        page = paginate(results, page_number, 10)
        assert len(page.items) == min(10, max(0, count - (page_number - 1) * 10))
        assert page.total_pages == total_pages


def test_first_page_has_no_prev() -> None:
    page = paginate(list(range(15)), 1, 10)

    assert page.has_prev is False
    assert page.has_next is True


def test_out_of_range_pages_are_empty() -> None:
    results = list(range(5))

    assert paginate(results, 0, 10).items == []
    assert paginate(results, -2, 10).items == []
    assert paginate(results, 7, 10).items == []


def test_empty_results() -> None:
    page = paginate([], 1, 10)

    assert page.items == []
    assert page.total_pages == 0
    assert page.has_next is False


def test_page_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        paginate([1, 2], 1, 0)


def test_format_duration() -> None:
    assert format_duration(245) == "4:05"
    assert format_duration(59) == "0:59"
    assert format_duration(None) == "0:00"
    assert format_duration("3:21") == "3:21"


def test_truncate_label() -> None:
    short = "1. 🟢 Short - Artist"
    long = "x" * 61

    assert truncate_label(short) == short
    assert truncate_label("y" * 60) == "y" * 60
    assert truncate_label(long) == "x" * 57 + "..."
    assert len(truncate_label(long)) == 60
