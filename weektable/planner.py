"""
Planner: the orchestration layer.

Owns the lecture catalog and the current schedule map. The map is never
edited in place: every mutation goes through weektable.store and replaces
self.schedules with the returned map. The planner also enforces the rules
the store leaves to its caller:

- the last remaining table cannot be removed (LastTable)
- with overlap policy "reject", a lecture overlapping the table is refused (ScheduleConflict)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from weektable import store
from weektable.catalog import LectureCatalog
from weektable.conflicts import ScheduleConflict, conflicting_blocks, find_conflicts
from weektable.model import CatalogEntry, Day, ScheduleBlock, SearchInfo
from weektable.pagination import PAGE_SIZE
from weektable.session import SearchSession


logger = logging.getLogger(__name__)

ALLOW = "allow"
REJECT = "reject"
OVERLAP_POLICIES = (ALLOW, REJECT)


class LastTable(ValueError):
    """Removing this table would leave no table at all."""


class Planner:
    def __init__(
        self,
        catalog: LectureCatalog,
        overlap_policy: str = ALLOW,
        page_size: int = PAGE_SIZE,
    ) -> None:
        if overlap_policy not in OVERLAP_POLICIES:
            raise ValueError(f"Unknown overlap policy: {overlap_policy!r}")
        self.catalog = catalog
        self.overlap_policy = overlap_policy
        self.page_size = page_size
        self.schedules: Dict[str, List[ScheduleBlock]] = store.initial_map()

    @property
    def table_ids(self) -> List[str]:
        return list(self.schedules)

    @property
    def can_remove(self) -> bool:
        return len(self.schedules) > 1

    def table(self, table_id: str) -> List[ScheduleBlock]:
        if table_id not in self.schedules:
            raise store.InvalidTable(table_id)
        return self.schedules[table_id]

    def open_search(self, table_id: str, day: Any = None, time: Optional[int] = None) -> SearchSession:
        """
        Open the search for one table, optionally seeded with a clicked cell.
        """
        self.table(table_id)
        info = SearchInfo(table_id=table_id, day=Day.parse(day), time=time)
        return SearchSession(
            self.catalog.load(),
            info=info,
            on_add=self.add_lecture,
            page_size=self.page_size,
        )

    def add_lecture(self, table_id: str, entry: CatalogEntry) -> List[ScheduleBlock]:
        blocks = list(entry.parsed_blocks)

        if self.overlap_policy == REJECT:
            clashes = conflicting_blocks(self.table(table_id), blocks)
            if clashes:
                raise ScheduleConflict(table_id, clashes)

        self.schedules = store.add_entries(self.schedules, table_id, blocks)
        logger.debug("Added %s (%d blocks) to %s", entry.id, len(blocks), table_id)
        return blocks

    def duplicate(self, table_id: str) -> str:
        self.schedules, new_id = store.duplicate(self.schedules, table_id)
        logger.debug("Duplicated %s as %s", table_id, new_id)
        return new_id

    def remove(self, table_id: str) -> None:
        self.table(table_id)
        if not self.can_remove:
            raise LastTable(f"Cannot remove the last table ({table_id})")
        self.schedules = store.remove(self.schedules, table_id)
        logger.debug("Removed %s", table_id)

    def delete_block(self, table_id: str, day: Any, time: int) -> int:
        """
        Remove the block(s) covering one cell. Returns how many blocks were removed.
        """
        before = len(self.table(table_id))
        self.schedules = store.delete_block(self.schedules, table_id, day, time)
        removed = before - len(self.schedules[table_id])
        logger.debug("Deleted %d block(s) at %s %s on %s", removed, day, time, table_id)
        return removed

    def conflicts(self, table_id: str) -> List[Tuple[ScheduleBlock, ScheduleBlock]]:
        return find_conflicts(self.table(table_id))
