"""Filtering and pagination helpers for the library grid.

Everything here is a pure function of its inputs. The controller derives
the visible grid from the fetched snapshot on every access instead of
storing filtered or paginated copies.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from coloria.core.records import SavedImageRecord

T = TypeVar("T")

# (minimum viewport width, items per page), widest first.  Three rows of
# 5/4/4/3/2/1 columns.
PAGE_SIZE_BREAKPOINTS: tuple[tuple[int, int], ...] = (
    (1536, 15),
    (1280, 12),
    (1024, 12),
    (768, 9),
    (640, 6),
)
MIN_PAGE_SIZE = 3


def page_size_for_width(width: int | float) -> int:
    """Return the number of grid items per page for a viewport width.

    Args:
        width: Viewport width in CSS pixels

    Returns:
        Items per page (15, 12, 9, 6 or 3)
    """
    for min_width, size in PAGE_SIZE_BREAKPOINTS:
        if width >= min_width:
            return size
    return MIN_PAGE_SIZE


def filter_records(
    records: Sequence[SavedImageRecord], query: str | None
) -> list[SavedImageRecord]:
    """Keep records whose prompt or id contains ``query``, ignoring case.

    An empty query returns the snapshot unchanged. Relative order is
    always preserved.

    Args:
        records: Snapshot to filter
        query: Search text

    Returns:
        Matching records in their original order
    """
    if not query:
        return list(records)

    needle = query.lower()
    return [
        record
        for record in records
        if needle in record.prompt.lower() or needle in record.id.lower()
    ]


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` items (0 when empty)."""
    return (count + page_size - 1) // page_size if count > 0 else 0


def clamp_page(page: int, count: int, page_size: int) -> int:
    """Clamp a one-based page number to ``[1, total_pages]``.

    An empty sequence still has page 1, so the grid always has a valid
    current page.
    """
    return min(max(page, 1), max(total_pages(count, page_size), 1))


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return the contiguous slice for a one-based page.

    Args:
        items: Full (filtered) sequence
        page: One-based page number; callers clamp it first
        page_size: Items per page

    Returns:
        ``items[(page - 1) * page_size : page * page_size]``
    """
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def page_of_index(index: int, page_size: int) -> int:
    """One-based page that holds the zero-based ``index``."""
    return index // page_size + 1
