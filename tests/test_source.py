"""
Tests for the catalog sources.

HTTP access is replaced by a mocked requests.Session so no network is used.
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from weektable.source import (
    DEFAULT_DATA_DIR,
    CatalogError,
    FileCatalogSource,
    HttpCatalogSource,
    collection_filename,
    download_catalog,
)

from tests.helpers import LIBERAL_ARTS, MAJORS


def _write_collections(directory: Path, majors=MAJORS, liberal_arts=LIBERAL_ARTS) -> None:
    (directory / collection_filename("majors")).write_text(json.dumps(majors, ensure_ascii=False), encoding="utf-8")
    (directory / collection_filename("liberal-arts")).write_text(
        json.dumps(liberal_arts, ensure_ascii=False), encoding="utf-8"
    )


def _mock_session(payloads: dict) -> mock.Mock:
    session = mock.Mock(spec=requests.Session)

    def get(url, timeout=None):
        resp = mock.Mock()
        name = url.rsplit("/", 1)[-1]
        if name not in payloads:
            resp.raise_for_status.side_effect = requests.HTTPError(f"404 for {url}")
        resp.json.return_value = payloads.get(name)
        return resp

    session.get.side_effect = get
    return session


class TestFileCatalogSource(unittest.TestCase):
    def test_fetch_all_majors_first(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            _write_collections(Path(d))
            records = FileCatalogSource(d).fetch_all()
        self.assertEqual([r["id"] for r in records], ["CS101", "CS201", "MA101", "LA100"])

    def test_missing_file_raises_oserror(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(OSError):
                FileCatalogSource(d).fetch_all()

    def test_payload_must_be_a_list(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            _write_collections(Path(d), majors={"id": "x"})
            with self.assertRaises(CatalogError):
                FileCatalogSource(d).fetch("majors")

    def test_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            _write_collections(Path(d))
            (Path(d) / collection_filename("majors")).write_text("{broken", encoding="utf-8")
            with self.assertRaises(CatalogError):
                FileCatalogSource(d).fetch("majors")

    def test_bundled_sample_data_loads(self) -> None:
        records = FileCatalogSource(DEFAULT_DATA_DIR).fetch_all()
        self.assertTrue(records)
        self.assertTrue(all("schedule" in r for r in records))


class TestHttpCatalogSource(unittest.TestCase):
    def test_fetch_all_and_cache(self) -> None:
        session = _mock_session(
            {"schedules-majors.json": MAJORS, "schedules-liberal-arts.json": LIBERAL_ARTS}
        )
        source = HttpCatalogSource("https://example.org/data/", session=session, timeout=5)

        records = source.fetch_all()
        self.assertEqual(len(records), 4)
        self.assertEqual(records[0]["id"], "CS101")

        source.fetch_all()
        self.assertEqual(session.get.call_count, 2)
        session.get.assert_any_call("https://example.org/data/schedules-majors.json", timeout=5)

    def test_http_error_propagates(self) -> None:
        session = _mock_session({"schedules-majors.json": MAJORS})
        source = HttpCatalogSource("https://example.org", session=session)
        with self.assertRaises(requests.HTTPError):
            source.fetch_all()


class TestDownload(unittest.TestCase):
    def test_download_writes_and_skips(self) -> None:
        session = _mock_session(
            {"schedules-majors.json": MAJORS, "schedules-liberal-arts.json": LIBERAL_ARTS}
        )
        with tempfile.TemporaryDirectory() as d, mock.patch("weektable.source.requests.Session", return_value=session):
            with mock.patch("builtins.print"):
                written = download_catalog("https://example.org", d)
                self.assertEqual(len(written), 2)
                data = json.loads((Path(d) / "schedules-majors.json").read_text(encoding="utf-8"))
                self.assertEqual(data[0]["id"], "CS101")

                again = download_catalog("https://example.org", d)
                self.assertEqual(again, [])


if __name__ == "__main__":
    unittest.main()
