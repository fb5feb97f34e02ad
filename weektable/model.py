"""
Central data model definitions used across the project.

This module defines the canonical structure of lectures, schedule blocks and
search criteria so that:
- parser, catalog, filters and the schedule store share the same field names
- objects handed between layers are immutable snapshots (frozen dataclasses)
- a block placed on a table describes itself without a catalog lookup
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional, Tuple


class Day(str, Enum):
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def parse(cls, label: Any) -> Optional["Day"]:
        """
        Accept 'Mon', 'mon', 'MON' or the Korean labels used by the catalog ('월', '화', ...).
        Returns None for anything else.
        """
        if isinstance(label, Day):
            return label
        text = str(label or "").strip()
        if not text:
            return None
        if text in KOREAN_DAYS:
            return KOREAN_DAYS[text]
        lowered = text.lower()
        for day in cls:
            if lowered in (day.value.lower(), _FULL_NAMES[day].lower()):
                return day
        return None

    def __str__(self) -> str:
        return self.value


KOREAN_DAYS = {
    "월": Day.MON,
    "화": Day.TUE,
    "수": Day.WED,
    "목": Day.THU,
    "금": Day.FRI,
    "토": Day.SAT,
    "일": Day.SUN,
}

_FULL_NAMES = {
    Day.MON: "Monday",
    Day.TUE: "Tuesday",
    Day.WED: "Wednesday",
    Day.THU: "Thursday",
    Day.FRI: "Friday",
    Day.SAT: "Saturday",
    Day.SUN: "Sunday",
}

WEEKDAYS: Tuple[Day, ...] = (Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI)
ALL_DAYS: Tuple[Day, ...] = tuple(Day)


@dataclass(frozen=True)
class LectureSummary:
    """
    Snapshot of one lecture, embedded in every ScheduleBlock placed on a table.
    """

    id: str
    title: str
    grade: int
    credits: str
    major: str
    schedule: str


@dataclass(frozen=True)
class ScheduleBlock:
    """
    One contiguous run of time slots on one day.

    `range` is non-empty, ascending and contiguous (see weektable.parse).
    `lecture` is None for blocks straight out of the parser.
    """

    day: Day
    range: Tuple[int, ...]
    room: Optional[str] = None
    lecture: Optional[LectureSummary] = None

    def covers(self, day: Any, slot: int) -> bool:
        return self.day == Day.parse(day) and slot in self.range


@dataclass(frozen=True)
class CatalogEntry:
    """
    Represents one lecture of the loaded catalog.

    Built once by weektable.catalog.build_entry; the parsed blocks and the
    lowercase search keys are never recomputed afterwards.
    """

    id: str
    title: str
    grade: int
    credits: str
    major: str
    schedule: str
    parsed_blocks: Tuple[ScheduleBlock, ...] = ()
    title_key: str = ""
    id_key: str = ""

    def summary(self) -> LectureSummary:
        return LectureSummary(
            id=self.id,
            title=self.title,
            grade=self.grade,
            credits=self.credits,
            major=self.major,
            schedule=self.schedule,
        )


def _int_set(values: Iterable[Any]) -> frozenset:
    out = set()
    for v in values:
        try:
            out.add(int(v))
        except (TypeError, ValueError):
            continue
    return frozenset(out)


def _day_set(values: Iterable[Any]) -> frozenset:
    days = (Day.parse(v) for v in values)
    return frozenset(d for d in days if d is not None)


def _str_set(values: Iterable[Any]) -> frozenset:
    return frozenset(str(v) for v in values if v is not None)


_NORMALIZERS = {
    "grades": _int_set,
    "days": _day_set,
    "times": _int_set,
    "majors": _str_set,
}


@dataclass(frozen=True)
class SearchCriteria:
    """
    User-editable search options.

    Set-valued fields use "empty = no restriction". Categories are ANDed,
    values inside one category are ORed.
    """

    query: str = ""
    grades: frozenset = field(default_factory=frozenset)
    days: frozenset = field(default_factory=frozenset)
    times: frozenset = field(default_factory=frozenset)
    majors: frozenset = field(default_factory=frozenset)
    credits: Optional[int] = None

    def replace(self, name: str, value: Any) -> "SearchCriteria":
        """
        Return a copy with one field changed. Set-valued fields accept any iterable.
        """
        if name == "query":
            return replace(self, query="" if value is None else str(value))
        if name == "credits":
            return replace(self, credits=None if value is None else int(value))
        if name in _NORMALIZERS:
            return replace(self, **{name: _NORMALIZERS[name](value or ())})
        raise ValueError(f"Unknown search option: {name!r}")

    def seeded(self, day: Optional[Day] = None, time: Optional[int] = None) -> "SearchCriteria":
        """
        Days/times from a table cell click; missing values clear the restriction.
        """
        return replace(
            self,
            days=frozenset([day]) if day else frozenset(),
            times=frozenset([time]) if time else frozenset(),
        )


@dataclass(frozen=True)
class SearchInfo:
    """
    Produced by a click on a table: which table to add to, optionally the clicked cell.
    """

    table_id: str
    day: Optional[Day] = None
    time: Optional[int] = None
