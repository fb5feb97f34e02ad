"""
Catalog sources (raw lecture records).

The catalog consists of two collections, always concatenated in this order:

    schedules-majors.json
    schedules-liberal-arts.json

Each collection is a JSON list of raw records:

    {"id": ..., "title": ..., "grade": ..., "credits": ..., "major": ..., "schedule": ...}

Sources:
- HttpCatalogSource reads them from a web server (requests)
- FileCatalogSource reads them from a local directory (default: the bundled sample data)

Running this module downloads the remote collections into a local directory,
so later runs can work offline with FileCatalogSource.
"""

from __future__ import annotations

import argparse
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Paths & collections
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"

COLLECTIONS = ("majors", "liberal-arts")


class CatalogError(ValueError):
    """The source returned something that is not a list of lecture records."""


def collection_filename(collection: str) -> str:
    return f"schedules-{collection}.json"


def _ensure_records(payload: Any, collection: str) -> List[Dict[str, Any]]:
    if not isinstance(payload, list):
        raise CatalogError(f"Collection {collection!r} is not a list (got {type(payload).__name__})")
    return payload


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class CatalogSource:
    """
    Base class: subclasses implement _fetch(collection).

    Responses are cached per collection, so calling fetch_all() twice on the
    same source performs the underlying read only once.
    """

    def __init__(self) -> None:
        self._responses: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def _fetch(self, collection: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def fetch(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            cached = self._responses.get(collection)
        if cached is not None:
            return cached

        records = _ensure_records(self._fetch(collection), collection)
        logger.debug("Fetched %d records from collection %s", len(records), collection)

        with self._lock:
            self._responses[collection] = records
        return records

    def fetch_all(self) -> List[Dict[str, Any]]:
        """
        Fetch all collections in parallel and concatenate them (majors first).
        """
        with ThreadPoolExecutor(max_workers=len(COLLECTIONS), thread_name_prefix="catalog-fetch") as pool:
            results = list(pool.map(self.fetch, COLLECTIONS))

        out: List[Dict[str, Any]] = []
        for records in results:
            out.extend(records)
        return out


class HttpCatalogSource(CatalogSource):
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def url_for(self, collection: str) -> str:
        return f"{self.base_url}/{collection_filename(collection)}"

    def _fetch(self, collection: str) -> List[Dict[str, Any]]:
        url = self.url_for(collection)
        logger.info("GET %s", url)
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


class FileCatalogSource(CatalogSource):
    def __init__(self, data_dir: str | Path = DEFAULT_DATA_DIR) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)

    def _fetch(self, collection: str) -> List[Dict[str, Any]]:
        path = self.data_dir / collection_filename(collection)
        logger.info("Reading %s", path)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}") from e


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------


def download_catalog(
    base_url: str,
    out_dir: str | Path = DEFAULT_DATA_DIR,
    refresh: bool = False,
    timeout: float = 30,
) -> List[Path]:
    """
    Save every remote collection as JSON into out_dir. Existing files are kept unless refresh=True.
    """
    target = Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)
    source = HttpCatalogSource(base_url, timeout=timeout)

    written: List[Path] = []
    for collection in COLLECTIONS:
        out_file = target / collection_filename(collection)

        if out_file.exists() and not refresh:
            print(f"SKIP  {collection}")
            continue

        print(f"FETCH {collection}")
        records = source.fetch(collection)
        out_file.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        written.append(out_file)

    print("Download finished.")
    return written


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="weektable.source", description="Download the lecture catalog (cache JSON)")
    p.add_argument("--base-url", "-u", type=str, required=True, help="Server hosting schedules-*.json")
    p.add_argument("--out-dir", type=Path, default=DEFAULT_DATA_DIR, help="Directory for the JSON files")
    p.add_argument("--refresh", action="store_true", help="Re-fetch and overwrite existing files")
    p.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    download_catalog(args.base_url.strip(), args.out_dir, refresh=args.refresh, timeout=args.timeout)


if __name__ == "__main__":
    main()
