"""Pagination helpers for product listings."""

from typing import List, Union

ELLIPSIS = '...'

def total_pages(total_count: int, per_page: int) -> int:
    """Number of pages needed for total_count items."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    return (total_count + per_page - 1) // per_page

def page_numbers(current_page: int, total_pages: int, max_pages: int = 5) -> List[Union[int, str]]:
    """Page links to show in a pager.

    All pages are listed when they fit in max_pages. Otherwise the first and
    last pages are always shown with a small window around the current page,
    and gaps are marked with '...'.

    >>> page_numbers(5, 10)
    [1, '...', 4, 5, 6, '...', 10]
    """
    if total_pages <= max_pages:
        return list(range(1, total_pages + 1))

    current_page = min(max(current_page, 1), total_pages)

    start = max(2, current_page - 1)
    end = min(total_pages - 1, current_page + 1)

    # Keep the window the same width near either edge
    if current_page <= 3:
        end = 4
    if current_page >= total_pages - 2:
        start = total_pages - 3

    pages: List[Union[int, str]] = [1]
    if start > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(start, end + 1))
    if end < total_pages - 1:
        pages.append(ELLIPSIS)
    pages.append(total_pages)
    return pages
