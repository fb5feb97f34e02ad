"""
Lecture catalog: one-time load and indexing of all lectures.

Cache lifecycle (per LectureCatalog instance):

    empty -> loading(future) -> loaded(entries)

While a load is in flight every caller receives the same Future, so the
source is read once no matter how many consumers ask at the same time.
A failed load returns the catalog to "empty"; the next load() starts over.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from weektable.filters import distinct_majors
from weektable.model import CatalogEntry
from weektable.parse import parse_schedule
from weektable.source import CatalogSource


logger = logging.getLogger(__name__)

EMPTY = "empty"
LOADING = "loading"
LOADED = "loaded"


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _safe_int(x: Any) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return 0


def build_entry(record: Any) -> Optional[CatalogEntry]:
    """
    Turn one raw record into a CatalogEntry: parse the schedule once, embed the
    lecture summary into each block and precompute the lowercase search keys.
    """
    if not isinstance(record, dict):
        return None

    entry = CatalogEntry(
        id=_safe_str(record.get("id")).strip(),
        title=_safe_str(record.get("title")).strip(),
        grade=_safe_int(record.get("grade")),
        credits=_safe_str(record.get("credits")).strip(),
        major=_safe_str(record.get("major")).strip(),
        schedule=_safe_str(record.get("schedule")),
    )
    summary = entry.summary()
    blocks = tuple(replace(b, lecture=summary) for b in parse_schedule(entry.schedule))

    return replace(
        entry,
        parsed_blocks=blocks,
        title_key=entry.title.lower(),
        id_key=entry.id.lower(),
    )


def build_entries(records: Iterable[Any]) -> List[CatalogEntry]:
    out: List[CatalogEntry] = []
    for record in records:
        entry = build_entry(record)
        if entry is not None:
            out.append(entry)
    return out


class LectureCatalog:
    """
    Owns the loaded catalog. Use one instance per application (or per test).
    """

    def __init__(self, source: CatalogSource) -> None:
        self.source = source
        self._lock = threading.Lock()
        self._entries: Optional[List[CatalogEntry]] = None
        self._pending: Optional[Future] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._by_id: Dict[str, CatalogEntry] = {}

    def __enter__(self) -> "LectureCatalog":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def state(self) -> str:
        with self._lock:
            if self._entries is not None:
                return LOADED
            if self._pending is not None:
                return LOADING
            return EMPTY

    @property
    def entries(self) -> List[CatalogEntry]:
        """
        Loaded entries, or [] while nothing is loaded. Treat as read-only.
        """
        return self._entries if self._entries is not None else []

    def load_async(self) -> Future:
        """
        Start (or join) the catalog load and return its Future.
        """
        with self._lock:
            if self._entries is not None:
                done: Future = Future()
                done.set_result(self._entries)
                return done

            if self._pending is not None:
                return self._pending

            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="catalog-load")
            self._pending = self._executor.submit(self._load)
            return self._pending

    def load(self) -> List[CatalogEntry]:
        """
        Block until the catalog is available. Fetch errors propagate to the caller.
        """
        return self.load_async().result()

    def _load(self) -> List[CatalogEntry]:
        start = time.perf_counter()
        logger.info("Catalog load started")
        try:
            entries = build_entries(self.source.fetch_all())
        except Exception as e:
            logger.warning("Catalog load failed: %s", e)
            with self._lock:
                self._pending = None
            raise

        with self._lock:
            self._entries = entries
            self._by_id = {e.id.upper(): e for e in entries}
            self._pending = None

        logger.info("Catalog loaded: %d lectures in %.1f ms", len(entries), (time.perf_counter() - start) * 1000)
        return entries

    def find(self, lecture_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(_safe_str(lecture_id).strip().upper())

    def majors(self) -> List[str]:
        return distinct_majors(self.entries)

    def close(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
