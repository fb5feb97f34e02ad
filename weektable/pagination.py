"""
Incremental pagination of search results.

Only a growing prefix of the results is shown. When the sentinel at the end
of the list becomes visible, one more page is revealed. Changing the search
criteria starts again at page 1 with the list scrolled to the top.
"""

from __future__ import annotations

import math
from typing import Callable, Generic, List, Optional, Sequence, TypeVar


T = TypeVar("T")

PAGE_SIZE = 100


def last_page(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size)


def visible(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> List[T]:
    """
    The first min(page * page_size, len(items)) items.
    """
    return list(items[: max(page, 0) * page_size])


class PaginationController(Generic[T]):
    def __init__(
        self,
        page_size: int = PAGE_SIZE,
        on_scroll_reset: Optional[Callable[[], None]] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size!r}")
        self.page_size = page_size
        self.on_scroll_reset = on_scroll_reset
        self.page = 1
        self._results: Sequence[T] = []
        self._intersecting = False

    @property
    def results(self) -> Sequence[T]:
        return self._results

    @property
    def last_page(self) -> int:
        return last_page(len(self._results), self.page_size)

    @property
    def visible(self) -> List[T]:
        return visible(self._results, self.page, self.page_size)

    @property
    def has_more(self) -> bool:
        return self.page < self.last_page

    def advance(self) -> bool:
        """
        Reveal one more page. At the last page this is a no-op; returns whether the page changed.
        """
        new_page = min(max(self.last_page, 1), self.page + 1)
        changed = new_page != self.page
        self.page = new_page
        return changed

    def on_visibility(self, intersecting: bool) -> bool:
        """
        Sentinel visibility signal. Only the transition into "intersecting" advances.
        """
        entering = intersecting and not self._intersecting
        self._intersecting = intersecting
        if not entering:
            return False
        return self.advance()

    def reset(self, results: Sequence[T]) -> None:
        """
        New result set: back to page 1 and scroll the results container to the top.
        """
        self._results = results
        self.page = 1
        self._intersecting = False
        if self.on_scroll_reset is not None:
            self.on_scroll_reset()
