from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from weektable.conflicts import ScheduleConflict
from weektable.model import ALL_DAYS, WEEKDAYS, CatalogEntry, Day, ScheduleBlock
from weektable.parse import SLOT_COUNT, slot_label
from weektable.planner import LastTable, Planner
from weektable.session import SearchSession
from weektable.store import InvalidTable


console = Console()

SEARCH_HELP = (
    "Commands: q <text> | g <grades> | d <days> | t <slots> | m <major #s> | c <credits>\n"
    "          majors | clear | more | id <lecture id> = add by id | <number> = add | blank = back"
)


def _println(msg: str = "") -> None:
    # messages carry catalog text, never rich markup
    console.print(msg, markup=False)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _plain(html: str) -> str:
    # majors and schedules in the catalog may contain <br>/<p> markup
    if "<" not in html:
        return html
    return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)


def _number(text: str) -> Optional[int]:
    return int(text) if re.fullmatch(r"[0-9]+", text) else None


def _split_values(text: str) -> list[str]:
    return [x.strip() for x in text.replace(" ", ",").split(",") if x.strip()]


def _table_name(planner: Planner, table_id: str) -> str:
    return f"Timetable {planner.table_ids.index(table_id) + 1}"


def run_interactive(planner: Planner) -> None:
    """
    Interactive menu loop over an in-memory set of timetables.
    """
    while True:
        _print_header(planner)

        choice = _prompt(
            "\n[1] View timetables\n"
            "[2] Search + add lecture\n"
            "[3] Duplicate a timetable\n"
            "[4] Remove a timetable\n"
            "[5] Delete lecture at a cell\n"
            "[6] Show overlaps\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_view(planner)
        elif choice == "2":
            _flow_search_add(planner)
        elif choice == "3":
            _flow_duplicate(planner)
        elif choice == "4":
            _flow_remove(planner)
        elif choice == "5":
            _flow_delete_cell(planner)
        elif choice == "6":
            _flow_conflicts(planner)
        else:
            _println("Invalid choice.")


def _print_header(planner: Planner) -> None:
    _println("\n=== weektable (interactive) ===")
    _println(f"Lectures in catalog: {len(planner.catalog.entries)} | Timetables: {len(planner.table_ids)}")


def _pick_table(planner: Planner, action: str) -> Optional[str]:
    ids = planner.table_ids
    if len(ids) == 1:
        return ids[0]

    _println(f"{action}:")
    for i, table_id in enumerate(ids, start=1):
        _println(f"{i}) {_table_name(planner, table_id)} ({len(planner.schedules[table_id])} blocks)")

    pick = _prompt("Enter number [blank = cancel]: ").strip()
    if not pick:
        return None
    n = _number(pick)
    if n is None or not (1 <= n <= len(ids)):
        _println("Out of range.")
        return None
    return ids[n - 1]


def _ask_cell(msg: str) -> tuple[Optional[Day], Optional[int], bool]:
    """
    Ask for 'Mon 3'. Returns (day, slot, ok); blank input gives (None, None, True).
    """
    raw = _prompt(msg).strip()
    if not raw:
        return None, None, True

    parts = raw.split()
    slot = _number(parts[1]) if len(parts) == 2 else None
    if slot is None:
        _println("Expected a day and a slot number, e.g. 'Mon 3'.")
        return None, None, False

    day = Day.parse(parts[0])
    if day is None or not (1 <= slot <= SLOT_COUNT):
        _println("Unknown day or slot.")
        return None, None, False
    return day, slot, True


def _cell_text(blocks: list[ScheduleBlock], day: Day, slot: int) -> str:
    titles = [escape(b.lecture.title) if b.lecture else "?" for b in blocks if b.covers(day, slot)]
    return " / ".join(titles)


def _render_table(planner: Planner, table_id: str) -> None:
    blocks = planner.schedules[table_id]
    days = [d for d in ALL_DAYS if d in WEEKDAYS or any(b.day == d for b in blocks)]
    last_slot = max([18] + [b.range[-1] for b in blocks])

    table = Table(title=_table_name(planner, table_id), box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Time")
    for day in days:
        table.add_column(day.value)

    for slot in range(1, last_slot + 1):
        row = [str(slot), slot_label(slot)]
        row.extend(_cell_text(blocks, day, slot) for day in days)
        table.add_row(*row)

    console.print(table)


def _flow_view(planner: Planner) -> None:
    for table_id in planner.table_ids:
        _render_table(planner, table_id)


def _print_results(session: SearchSession) -> None:
    table = Table(
        title=f"Results: {session.count} (page {session.page}/{max(session.last_page, 1)})",
        box=box.SIMPLE,
    )
    table.add_column("#", justify="right")
    table.add_column("Id", style="bold cyan")
    table.add_column("Grade", justify="right")
    table.add_column("Title")
    table.add_column("Credits", justify="right")
    table.add_column("Major", style="magenta")
    table.add_column("Schedule", style="green")

    for i, entry in enumerate(session.visible, start=1):
        table.add_row(
            str(i),
            escape(entry.id),
            str(entry.grade),
            escape(entry.title),
            escape(entry.credits),
            escape(_plain(entry.major)),
            escape(_plain(entry.schedule)),
        )
    console.print(table)


def _apply_search_command(session: SearchSession, cmd: str, arg: str) -> bool:
    """
    Apply one filter command. Returns False if the command is unknown.
    """
    if cmd == "q":
        session.update("query", arg)
    elif cmd == "g":
        session.update("grades", [v for v in _split_values(arg) if _number(v) is not None])
    elif cmd == "d":
        days = [Day.parse(v) for v in _split_values(arg)]
        session.update("days", [d for d in days if d is not None])
    elif cmd == "t":
        session.update("times", [v for v in _split_values(arg) if _number(v) is not None])
    elif cmd == "m":
        picks = [n for n in map(_number, _split_values(arg)) if n is not None]
        session.update("majors", [session.majors[i - 1] for i in picks if 1 <= i <= len(session.majors)])
    elif cmd == "c":
        session.update("credits", arg)
    elif cmd == "clear":
        session.clear()
    else:
        return False
    return True


def _flow_search_add(planner: Planner) -> None:
    """
    Search lectures and add one to a timetable. Optionally seeded with a cell
    (day + slot) the way clicking an empty cell of the table would.
    """
    table_id = _pick_table(planner, "Add to timetable")
    if table_id is None:
        return

    day, slot, ok = _ask_cell("Start from a cell, e.g. 'Mon 3' [blank = all times]: ")
    if not ok:
        return

    session = planner.open_search(table_id, day, slot)
    _println(SEARCH_HELP)

    while True:
        _print_results(session)
        raw = _prompt("Search> ").strip()
        if not raw:
            return

        i = _number(raw)
        if i is not None:
            shown = session.visible
            if not (1 <= i <= len(shown)):
                _println("Out of range.")
                continue
            if _add_lecture(session, shown[i - 1]):
                return
            continue

        if raw == "more":
            if not session.more():
                _println("No more results.")
            continue

        if raw == "majors":
            for i, major in enumerate(session.majors, start=1):
                _println(f"{i}) {_plain(major)}")
            continue

        cmd, _, arg = raw.partition(" ")
        if cmd.lower() == "id":
            entry = planner.catalog.find(arg)
            if entry is None:
                _println(f"No lecture with id {arg.strip()!r}.")
                continue
            if _add_lecture(session, entry):
                return
            continue

        if not _apply_search_command(session, cmd.lower(), arg.strip()):
            _println(SEARCH_HELP)


def _add_lecture(session: SearchSession, entry: CatalogEntry) -> bool:
    try:
        blocks = session.add(entry)
    except ScheduleConflict as e:
        console.print(f"[red]Not added.[/] {escape(str(e))}")
        return False

    if not blocks:
        _println(f"Added {entry.id}, but it has no schedule blocks to show.")
    else:
        _println(f"Added: {entry.id} {entry.title} ({len(blocks)} blocks)")
    return True


def _flow_duplicate(planner: Planner) -> None:
    table_id = _pick_table(planner, "Duplicate timetable")
    if table_id is None:
        return
    new_id = planner.duplicate(table_id)
    _println(f"Duplicated {_table_name(planner, table_id)} as {_table_name(planner, new_id)}.")


def _flow_remove(planner: Planner) -> None:
    if not planner.can_remove:
        _println("The last timetable cannot be removed.")
        return

    table_id = _pick_table(planner, "Remove timetable")
    if table_id is None:
        return
    try:
        planner.remove(table_id)
    except (InvalidTable, LastTable) as e:
        _println(f"Not removed: {e}")
        return
    _println("Removed.")


def _flow_delete_cell(planner: Planner) -> None:
    table_id = _pick_table(planner, "Delete from timetable")
    if table_id is None:
        return

    _render_table(planner, table_id)
    day, slot, ok = _ask_cell("Cell to clear, e.g. 'Tue 4' [blank = cancel]: ")
    if not ok or day is None or slot is None:
        return

    removed = planner.delete_block(table_id, day, slot)
    if removed:
        _println(f"Removed {removed} block(s).")
    else:
        _println("Nothing scheduled in that cell.")


def _flow_conflicts(planner: Planner) -> None:
    table_id = _pick_table(planner, "Check timetable")
    if table_id is None:
        return

    confs = planner.conflicts(table_id)
    if not confs:
        _println("No overlaps found.")
        return

    def label(b: ScheduleBlock) -> str:
        title = b.lecture.title if b.lecture else "?"
        return f"{b.day.value} {slot_label(b.range[0]).split('~')[0]}-{slot_label(b.range[-1]).split('~')[1]} {title}"

    _println(f"Overlaps found: {len(confs)}")
    for a, b in confs:
        _println(f"- {label(a)}  <->  {label(b)}")

