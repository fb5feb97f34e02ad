"""
Schedule sets (the timetables).

A schedule map is {table_id: [ScheduleBlock, ...]}. Every function here
returns a NEW mapping and leaves its input untouched, so a caller holding a
previous map always sees a consistent snapshot.

Unknown table ids raise InvalidTable before anything is built, i.e. the
operation has no effect.

Precondition owned by the caller: at least one table must exist at all times.
remove() does not check it (see weektable.planner.Planner.remove).
"""

from __future__ import annotations

import itertools
from time import time_ns
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from weektable.model import Day, ScheduleBlock


ScheduleMap = Mapping[str, List[ScheduleBlock]]

DEFAULT_TABLE_ID = "schedule-1"


class InvalidTable(KeyError):
    """The table id is not part of the schedule map."""


def _require(schedules: ScheduleMap, table_id: str) -> None:
    if table_id not in schedules:
        raise InvalidTable(table_id)


def initial_map() -> Dict[str, List[ScheduleBlock]]:
    return {DEFAULT_TABLE_ID: []}


def new_table_id(schedules: ScheduleMap) -> str:
    """
    Fresh key based on a nanosecond timestamp; a counter suffix resolves collisions.
    """
    base = f"schedule-{time_ns()}"
    if base not in schedules:
        return base
    for n in itertools.count(1):
        candidate = f"{base}-{n}"
        if candidate not in schedules:
            return candidate
    raise AssertionError("unreachable")


def add_entries(
    schedules: ScheduleMap, table_id: str, entries: Iterable[ScheduleBlock]
) -> Dict[str, List[ScheduleBlock]]:
    _require(schedules, table_id)
    out = dict(schedules)
    out[table_id] = [*schedules[table_id], *entries]
    return out


def duplicate(schedules: ScheduleMap, table_id: str) -> Tuple[Dict[str, List[ScheduleBlock]], str]:
    """
    Copy a table under a new id. Returns (new_map, new_id).
    """
    _require(schedules, table_id)
    new_id = new_table_id(schedules)
    out = dict(schedules)
    out[new_id] = list(schedules[table_id])
    return out, new_id


def remove(schedules: ScheduleMap, table_id: str) -> Dict[str, List[ScheduleBlock]]:
    _require(schedules, table_id)
    return {k: v for k, v in schedules.items() if k != table_id}


def delete_block(schedules: ScheduleMap, table_id: str, day: Any, time: int) -> Dict[str, List[ScheduleBlock]]:
    """
    Remove every block of the table that covers the clicked cell (day, time).

    Membership, not equality: clicking any slot of a multi-slot block removes the whole block.
    """
    _require(schedules, table_id)
    target = Day.parse(day)
    out = dict(schedules)
    out[table_id] = [b for b in schedules[table_id] if not b.covers(target, time)]
    return out
