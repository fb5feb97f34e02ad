"""
Search session: criteria -> filtered results -> visible page.

Every criteria change goes through _apply(), which always runs the same two
steps in this order:

1. recompute the filtered results for the new criteria
2. reset pagination to page 1 with those results (scrolls back to the top)

Both steps finish before control returns, so a reader never sees new
results at a stale page or scroll offset.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from weektable.filters import distinct_majors, filter_entries, parse_credits
from weektable.model import CatalogEntry, SearchCriteria, SearchInfo
from weektable.pagination import PAGE_SIZE, PaginationController


AddSink = Callable[[str, CatalogEntry], Any]


class SearchSession:
    def __init__(
        self,
        entries: Sequence[CatalogEntry] = (),
        info: Optional[SearchInfo] = None,
        on_add: Optional[AddSink] = None,
        page_size: int = PAGE_SIZE,
        on_scroll_reset: Optional[Callable[[], None]] = None,
    ) -> None:
        self.entries: Sequence[CatalogEntry] = entries
        self.info = info
        self.on_add = on_add
        self.criteria = SearchCriteria()
        self.results: List[CatalogEntry] = []
        self.pagination: PaginationController[CatalogEntry] = PaginationController(
            page_size=page_size, on_scroll_reset=on_scroll_reset
        )
        self._majors: List[str] = distinct_majors(entries)

        criteria = self.criteria
        if info is not None:
            criteria = criteria.seeded(info.day, info.time)
        self._apply(criteria)

    # -- derived values ------------------------------------------------------

    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def visible(self) -> List[CatalogEntry]:
        return self.pagination.visible

    @property
    def page(self) -> int:
        return self.pagination.page

    @property
    def last_page(self) -> int:
        return self.pagination.last_page

    @property
    def majors(self) -> List[str]:
        return self._majors

    # -- criteria changes ----------------------------------------------------

    def _apply(self, criteria: SearchCriteria) -> None:
        results = filter_entries(self.entries, criteria)
        self.criteria = criteria
        self.results = results
        self.pagination.reset(results)

    def update(self, name: str, value: Any) -> None:
        """
        Change one search option ('query', 'grades', 'days', 'times', 'majors', 'credits').
        """
        if name == "credits":
            # free text; unparseable means no credit filter
            value = parse_credits(value)
        self._apply(self.criteria.replace(name, value))

    def seed(self, info: Optional[SearchInfo]) -> None:
        """
        A table cell was clicked: its day/time become the day/time filters (or clear them).
        """
        self.info = info
        if info is None:
            self._apply(self.criteria.seeded())
        else:
            self._apply(self.criteria.seeded(info.day, info.time))

    def clear(self) -> None:
        self._apply(SearchCriteria())

    def set_entries(self, entries: Sequence[CatalogEntry]) -> None:
        self.entries = entries
        self._majors = distinct_majors(entries)
        self._apply(self.criteria)

    # -- signals -------------------------------------------------------------

    def on_visibility(self, intersecting: bool) -> bool:
        return self.pagination.on_visibility(intersecting)

    def more(self) -> bool:
        """
        Same as the sentinel scrolling into view and out again.
        """
        advanced = self.on_visibility(True)
        self.on_visibility(False)
        return advanced

    # -- adding --------------------------------------------------------------

    def add(self, entry: CatalogEntry) -> Any:
        """
        Hand the lecture to the sink for the table this session was opened for.
        """
        if self.info is None or self.on_add is None:
            raise ValueError("Search session is not attached to a table")
        return self.on_add(self.info.table_id, entry)
