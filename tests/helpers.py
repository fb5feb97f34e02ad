"""
Shared fixtures for the test suite: small raw catalogs and an in-memory source.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from weektable.catalog import build_entries
from weektable.model import CatalogEntry
from weektable.source import CatalogSource


MAJORS: List[Dict[str, Any]] = [
    {"id": "CS101", "grade": 1, "title": "Intro to Programming", "credits": "3", "major": "CS", "schedule": "월9,10(301)"},
    {"id": "CS201", "grade": 2, "title": "Data Structures", "credits": "3.5", "major": "CS", "schedule": "화10-11.5(302)"},
    {"id": "MA101", "grade": 1, "title": "Calculus", "credits": "2", "major": "Math", "schedule": "수13-14(401)"},
]

LIBERAL_ARTS: List[Dict[str, Any]] = [
    {"id": "LA100", "grade": 3, "title": "Writing Seminar", "credits": "1", "major": "Liberal Arts", "schedule": ""},
]


def sample_entries() -> List[CatalogEntry]:
    return build_entries(MAJORS + LIBERAL_ARTS)


class FakeSource(CatalogSource):
    """
    In-memory source. Counts underlying reads; can block until released or fail.
    """

    def __init__(
        self,
        collections: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        gate: Optional[threading.Event] = None,
        error: Optional[Exception] = None,
    ) -> None:
        super().__init__()
        self.collections = collections or {"majors": MAJORS, "liberal-arts": LIBERAL_ARTS}
        self.gate = gate
        self.error = error
        self.calls = 0
        self._count_lock = threading.Lock()

    def _fetch(self, collection: str) -> List[Dict[str, Any]]:
        with self._count_lock:
            self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.collections.get(collection, [])
