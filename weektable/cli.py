"""
CLI (Command Line Interface).

This module provides quick terminal commands for power users and for testing, e.g.:

    weektable search <text> --grade 2 --day Mon --time 3 --major CS --credits 3
    weektable majors
    weektable parse "월9,10(301)"
    weektable interactive
    weektable --base-url https://example.org/timetable download

Note:
- The interactive UI lives in weektable/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
- Catalog data comes from --data-dir (default: bundled sample data) or --base-url
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import requests
from rich.console import Console
from rich.logging import RichHandler

from weektable.catalog import LectureCatalog
from weektable.model import CatalogEntry, Day
from weektable.pagination import PAGE_SIZE
from weektable.parse import parse_schedule, slot_label
from weektable.planner import ALLOW, REJECT
from weektable.session import SearchSession
from weektable.source import DEFAULT_DATA_DIR, CatalogSource, FileCatalogSource, HttpCatalogSource, download_catalog


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_source(args: argparse.Namespace) -> CatalogSource:
    if args.base_url:
        return HttpCatalogSource(args.base_url.strip(), timeout=args.timeout)
    return FileCatalogSource(args.data_dir)


def _load_catalog(catalog: LectureCatalog) -> Optional[list[CatalogEntry]]:
    """
    Load the catalog; print a short message instead of a traceback on failure.
    """
    try:
        return catalog.load()
    except (requests.RequestException, OSError, ValueError) as e:
        print(f"Could not load the lecture catalog: {e}")
        return None


def _lecture_line(entry: CatalogEntry) -> str:
    bits = [entry.id, str(entry.grade), entry.title or "(no title)", entry.credits, entry.major, entry.schedule]
    return " | ".join(bits)


def _cmd_search(args: argparse.Namespace, catalog: LectureCatalog) -> int:
    """
    Filter the catalog and print the first --pages pages of results.
    """
    entries = _load_catalog(catalog)
    if entries is None:
        return 1

    if args.page_size <= 0:
        print("--page-size must be positive.")
        return 1

    days = []
    for label in args.day or []:
        day = Day.parse(label)
        if day is None:
            print(f"Unknown day: {label}")
            return 1
        days.append(day)

    session = SearchSession(entries, page_size=args.page_size)
    session.update("query", args.text or "")
    session.update("grades", args.grade or [])
    session.update("days", days)
    session.update("times", args.time or [])
    session.update("majors", args.major or [])
    session.update("credits", args.credits)

    for _ in range(1, max(args.pages, 1)):
        if not session.more():
            break

    print(f"Results: {session.count}")
    shown = session.visible
    for entry in shown:
        print(_lecture_line(entry))
    if session.count > len(shown):
        print(f"... and {session.count - len(shown)} more results (page {session.page}/{session.last_page})")

    return 0


def _cmd_majors(args: argparse.Namespace, catalog: LectureCatalog) -> int:
    if _load_catalog(catalog) is None:
        return 1

    majors = catalog.majors()
    if not majors:
        print("No majors.")
        return 0
    for major in majors:
        print(major)
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    """
    Show how a schedule string is split into blocks.
    """
    blocks = parse_schedule(args.schedule)
    if not blocks:
        print("No valid schedule groups.")
        return 1

    for b in blocks:
        start = slot_label(b.range[0]).split("~")[0]
        end = slot_label(b.range[-1]).split("~")[1]
        slots = ",".join(str(s) for s in b.range)
        room = f" @ {b.room}" if b.room else ""
        print(f"{b.day.value} slots {slots} ({start}-{end}){room}")
    return 0


def _cmd_download(args: argparse.Namespace) -> int:
    if not args.base_url:
        print("Please provide --base-url.")
        return 1
    try:
        download_catalog(args.base_url.strip(), args.out_dir, refresh=args.refresh, timeout=args.timeout)
    except (requests.RequestException, OSError, ValueError) as e:
        print(f"Download failed: {e}")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="weektable", description="Weekly timetable builder")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR, help="Directory with schedules-*.json")
    parser.add_argument("--base-url", type=str, default="", help="Load the catalog over HTTP instead")
    parser.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search for lectures")
    p_search.add_argument("text", type=str, nargs="?", default="", help="Part of the title or lecture id")
    p_search.add_argument("--grade", type=int, action="append", help="Grade (repeatable)")
    p_search.add_argument("--day", type=str, action="append", help="Day, e.g. Mon or 월 (repeatable)")
    p_search.add_argument("--time", type=int, action="append", help="Time slot 1-24 (repeatable)")
    p_search.add_argument("--major", type=str, action="append", help="Major (repeatable)")
    p_search.add_argument("--credits", type=str, default=None, help="Credits prefix, e.g. 3")
    p_search.add_argument("--pages", type=int, default=1, help="Number of pages to show")
    p_search.add_argument("--page-size", type=int, default=PAGE_SIZE, help="Results per page")

    sub.add_parser("majors", help="List all majors in the catalog")

    p_parse = sub.add_parser("parse", help="Parse a schedule string")
    p_parse.add_argument("schedule", type=str, help="Schedule text, e.g. '월9,10(301)'")

    p_inter = sub.add_parser("interactive", help="Interactive timetable builder")
    p_inter.add_argument("--reject-overlaps", action="store_true", help="Refuse lectures that overlap the table")
    p_inter.add_argument("--page-size", type=int, default=20, help="Results per page")

    p_download = sub.add_parser("download", help="Save the remote catalog locally (needs --base-url)")
    p_download.add_argument("--out-dir", type=Path, default=DEFAULT_DATA_DIR, help="Target directory")
    p_download.add_argument("--refresh", action="store_true", help="Overwrite existing files")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "parse":
        raise SystemExit(_cmd_parse(args))
    if args.command == "download":
        raise SystemExit(_cmd_download(args))

    with LectureCatalog(_build_source(args)) as catalog:
        if args.command == "search":
            raise SystemExit(_cmd_search(args, catalog))
        if args.command == "majors":
            raise SystemExit(_cmd_majors(args, catalog))

        if args.command == "interactive":
            from weektable.interactive import run_interactive
            from weektable.planner import Planner

            if _load_catalog(catalog) is None:
                raise SystemExit(1)
            planner = Planner(
                catalog,
                overlap_policy=REJECT if args.reject_overlaps else ALLOW,
                page_size=args.page_size,
            )
            run_interactive(planner)
            raise SystemExit(0)

    raise SystemExit(2)
