"""
Parsing (schedule text -> structured schedule blocks).

A catalog schedule string is a sequence of day groups, for example:

    월9,10(301)
    화10.5-12(공7-A)<p>목13-14.5(공7-A)
    Mon 18:00-19:45 (B201)

Grammar (one group):

    group := DAY RANGE ("," RANGE)* ("(" ROOM ")")?
    RANGE := START (("-" | "~") END)?

START/END are decimal hours (9, 10.5) or HH:MM clock times.

Important rules:
- END is exclusive: 9-10 covers the slots 09:00~09:30 and 09:30~10:00
- bare values in a chain are read pairwise as start and end marks (9,10 == 9-10)
- one ScheduleBlock per contiguous run of slots (a day with two disjoint
  ranges gives two blocks sharing day and room)
- best effort: malformed groups are skipped, parse_schedule never raises
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from weektable.model import Day, ScheduleBlock


# ---------------------------------------------------------------------------
# Slot table
# ---------------------------------------------------------------------------

DAY_START = 9 * 60
SLOT_MINUTES = 30


def _hm(hour: int, minute: int) -> int:
    return hour * 60 + minute


# (start, end) in minutes since midnight, index 0 = slot 1
TIME_SLOTS: Tuple[Tuple[int, int], ...] = tuple(
    [(DAY_START + i * SLOT_MINUTES, DAY_START + (i + 1) * SLOT_MINUTES) for i in range(18)]
    + [
        (_hm(18, 0), _hm(18, 50)),
        (_hm(18, 55), _hm(19, 45)),
        (_hm(19, 50), _hm(20, 40)),
        (_hm(20, 45), _hm(21, 35)),
        (_hm(21, 40), _hm(22, 30)),
        (_hm(22, 35), _hm(23, 25)),
    ]
)

SLOT_COUNT = len(TIME_SLOTS)


def _fmt(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slot_label(slot: int) -> str:
    """
    'HH:MM~HH:MM' for a slot number (1-based). Raises ValueError for unknown slots.
    """
    if not (1 <= slot <= SLOT_COUNT):
        raise ValueError(f"Invalid slot: {slot!r}")
    start, end = TIME_SLOTS[slot - 1]
    return f"{_fmt(start)}~{_fmt(end)}"


def slot_at(minutes: int) -> Optional[int]:
    """
    Slot containing the given time (minutes since midnight).

    Inside the regular day this is floor((hour - 9) / 0.5) + 1. A time falling
    into one of the short evening breaks maps to the following slot.
    Returns None before 09:00 and from 23:25 on.
    """
    if minutes < DAY_START:
        return None
    for i, (start, end) in enumerate(TIME_SLOTS, start=1):
        if minutes < end:
            return i
    return None


def last_slot_before(minutes: int) -> Optional[int]:
    """
    Last slot that starts strictly before the given (exclusive) end time.
    """
    found: Optional[int] = None
    for i, (start, _end) in enumerate(TIME_SLOTS, start=1):
        if start < minutes:
            found = i
        else:
            break
    return found


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DAY_PATTERN = "|".join(["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun", "[월화수목금토일]"])

_GROUP_RE = re.compile(
    rf"(?P<day>{_DAY_PATTERN})\s*(?P<ranges>[0-9.:,~\-\s]*)(?:\((?P<room>[^()]*)\))?",
    re.IGNORECASE,
)

_NUMBER_RE = re.compile(r"^\d{1,2}(?:\.\d+)?$")
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def _to_minutes(token: str) -> int:
    """
    '9' -> 540, '10.5' -> 630, '18:55' -> 1135. Raises ValueError otherwise.
    """
    token = token.strip()
    m = _CLOCK_RE.match(token)
    if m:
        h, mins = int(m.group(1)), int(m.group(2))
        if not (0 <= h <= 23 and 0 <= mins <= 59):
            raise ValueError(f"Invalid time value: {token!r}")
        return h * 60 + mins
    if _NUMBER_RE.match(token):
        return round(float(token) * 60)
    raise ValueError(f"Invalid time format: {token!r}")


def _interval_slots(start: int, end: int) -> List[int]:
    first = slot_at(start)
    last = last_slot_before(end)
    if first is None or last is None or end <= start or last < first:
        raise ValueError(f"Time range outside of the timetable: {_fmt(start)}-{_fmt(end)}")
    return list(range(first, last + 1))


def _single_slot(minutes: int) -> List[int]:
    slot = slot_at(minutes)
    if slot is None:
        raise ValueError(f"Time outside of the timetable: {_fmt(minutes)}")
    return [slot]


def _chain_slots(chain: str) -> List[int]:
    """
    Convert the RANGE chain of one group into a sorted list of distinct slots.
    Raises ValueError if any part of the chain is malformed.
    """
    tokens = [t.strip() for t in chain.split(",") if t.strip()]
    if not tokens:
        raise ValueError("No time ranges")

    slots: set[int] = set()
    pending: Optional[int] = None

    for token in tokens:
        bounds = re.split(r"\s*[-~]\s*", token)
        if len(bounds) == 2:
            if pending is not None:
                slots.update(_single_slot(pending))
                pending = None
            slots.update(_interval_slots(_to_minutes(bounds[0]), _to_minutes(bounds[1])))
        elif len(bounds) == 1:
            value = _to_minutes(bounds[0])
            if pending is None:
                pending = value
            else:
                slots.update(_interval_slots(pending, value))
                pending = None
        else:
            raise ValueError(f"Invalid range: {token!r}")

    if pending is not None:
        slots.update(_single_slot(pending))

    return sorted(slots)


def contiguous_runs(slots: Iterable[int]) -> List[Tuple[int, ...]]:
    """
    [1, 2, 3, 7, 8] -> [(1, 2, 3), (7, 8)]
    """
    runs: List[List[int]] = []
    for slot in sorted(set(slots)):
        if runs and runs[-1][-1] + 1 == slot:
            runs[-1].append(slot)
        else:
            runs.append([slot])
    return [tuple(r) for r in runs]


def _plain_text(text: str) -> str:
    # catalog schedules separate groups with <p>
    if "<" not in text:
        return text
    return BeautifulSoup(text, "html.parser").get_text("\n")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_group(day_label: str, chain: str, room: Optional[str] = None) -> List[ScheduleBlock]:
    """
    Parse one DAY + RANGE chain (+ optional room) into blocks.
    Raises ValueError for a malformed group.
    """
    day = Day.parse(day_label)
    if day is None:
        raise ValueError(f"Unknown day: {day_label!r}")

    room_text = (room or "").strip() or None
    return [ScheduleBlock(day=day, range=run, room=room_text) for run in contiguous_runs(_chain_slots(chain))]


def parse_schedule(text: Optional[str]) -> List[ScheduleBlock]:
    """
    Extract every valid group from a schedule string.

    Malformed groups are skipped so that one bad entry in the source data does
    not make the whole lecture unsearchable by day/time.
    """
    if not text:
        return []

    blocks: List[ScheduleBlock] = []
    for m in _GROUP_RE.finditer(_plain_text(str(text))):
        try:
            blocks.extend(parse_group(m.group("day"), m.group("ranges"), m.group("room")))
        except ValueError:
            continue
    return blocks
