"""
Overlap detection.

Given the blocks of one table, detect blocks that share a time slot.
Overlap rule:
    same day AND the slot ranges intersect

The schedule store itself never rejects overlaps; the planner decides what
to do with them (allow, or reject with ScheduleConflict).
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from weektable.model import ScheduleBlock


class ScheduleConflict(ValueError):
    """Adding blocks would overlap blocks already on the table."""

    def __init__(self, table_id: str, blocks: Sequence[ScheduleBlock]) -> None:
        self.table_id = table_id
        self.blocks = list(blocks)
        titles = sorted({b.lecture.title for b in self.blocks if b.lecture is not None})
        super().__init__(f"Overlaps on {table_id}: {', '.join(titles) or len(self.blocks)}")


def overlaps(a: ScheduleBlock, b: ScheduleBlock) -> bool:
    return a.day == b.day and not set(a.range).isdisjoint(b.range)


def find_conflicts(blocks: Sequence[ScheduleBlock]) -> List[Tuple[ScheduleBlock, ScheduleBlock]]:
    """
    Find overlapping block pairs (A,B), each pair appears once (i<j).
    """
    conflicts: List[Tuple[ScheduleBlock, ScheduleBlock]] = []

    # O(n^2) is fine for one weekly timetable
    for i in range(len(blocks)):
        for j in range(i + 1, len(blocks)):
            if overlaps(blocks[i], blocks[j]):
                conflicts.append((blocks[i], blocks[j]))

    return conflicts


def conflicting_blocks(existing: Iterable[ScheduleBlock], new: Sequence[ScheduleBlock]) -> List[ScheduleBlock]:
    """
    Blocks of `existing` that overlap any of `new`, in table order.
    """
    return [b for b in existing if any(overlaps(b, n) for n in new)]
