from __future__ import annotations

import math
from typing import List, NamedTuple, Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE = 30
PAGE_WINDOW = 10


class PageInfo(NamedTuple):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    window: List[int]
    has_prev: bool
    has_next: bool


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    if page_size <= 0 or count <= 0:
        return 0
    return math.ceil(count / page_size)


def paginate(items: Sequence[T], page_index: int, page_size: int = PAGE_SIZE) -> List[T]:
    """Half-open slice [page*size, (page+1)*size); out of range gives []."""
    if page_index < 0 or page_size <= 0:
        return []
    start = page_index * page_size
    return list(items[start:start + page_size])


def page_window(current: int, pages: int, window: int = PAGE_WINDOW) -> List[int]:
    """Page numbers to show around `current`, at most `window` of them.

    The window is centred on the current page and slides back at the end so
    it stays full whenever there are enough pages.
    """
    if pages <= 0 or window <= 0:
        return []
    start = max(0, current - window // 2)
    end = start + window
    if end > pages:
        end = pages
        start = max(0, end - window)
    return list(range(start, end))


def clamp_page(page_index: int, pages: int) -> int:
    if pages <= 0:
        return 0
    return min(max(page_index, 0), pages - 1)


def page_info(count: int, page_index: int, page_size: int = PAGE_SIZE, window: int = PAGE_WINDOW) -> PageInfo:
    pages = total_pages(count, page_size)
    return PageInfo(
        page=page_index,
        page_size=page_size,
        total_items=count,
        total_pages=pages,
        window=page_window(page_index, pages, window),
        has_prev=page_index > 0,
        has_next=page_index < pages - 1,
    )
