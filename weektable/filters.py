"""
Lecture filtering.

All predicates must pass (AND across categories, OR inside one category):

- text:    empty query, or query in lowercase title / lowercase id
- grade:   no grades selected, or entry.grade selected
- major:   no majors selected, or entry.major selected
- credits: unset, or the credits string starts with str(credits)
           ("3" matches "3" and "3.5"; a loose textual prefix on purpose)
- day/time: each satisfied if ANY parsed block matches

The parsed blocks and lowercase keys are precomputed by the catalog, so a
filter run is one linear pass without re-parsing.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from weektable.model import CatalogEntry, SearchCriteria


_LEADING_INT = re.compile(r"\s*([0-9]+)")


def parse_credits(value: Any) -> Optional[int]:
    """
    Credits typed as free text. The leading integer counts ("3.5" -> 3, "3학점" -> 3);
    no leading digits, or zero, means "no credit filter".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value or None
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    return int(m.group(1)) or None


def _matches_schedule(entry: CatalogEntry, criteria: SearchCriteria) -> bool:
    days = criteria.days
    times = criteria.times
    if not days and not times:
        return True

    blocks = entry.parsed_blocks
    if days and not any(b.day in days for b in blocks):
        return False
    if times and not any(not times.isdisjoint(b.range) for b in blocks):
        return False
    return True


def matches(entry: CatalogEntry, criteria: SearchCriteria, query_key: Optional[str] = None) -> bool:
    """
    Single-entry predicate. query_key is the lowercased query (computed once per filter run).
    """
    if query_key is None:
        query_key = (criteria.query or "").lower()

    if query_key and query_key not in entry.title_key and query_key not in entry.id_key:
        return False

    if criteria.grades and entry.grade not in criteria.grades:
        return False

    if criteria.majors and entry.major not in criteria.majors:
        return False

    if criteria.credits and not entry.credits.startswith(str(criteria.credits)):
        return False

    return _matches_schedule(entry, criteria)


def filter_entries(entries: Iterable[CatalogEntry], criteria: SearchCriteria) -> List[CatalogEntry]:
    """
    Matching entries in catalog order.
    """
    query_key = (criteria.query or "").lower()
    return [e for e in entries if matches(e, criteria, query_key)]


def distinct_majors(entries: Iterable[CatalogEntry]) -> List[str]:
    """
    Majors in order of first appearance (for the major choice list).
    """
    seen: dict[str, None] = {}
    for e in entries:
        seen.setdefault(e.major, None)
    return list(seen)
