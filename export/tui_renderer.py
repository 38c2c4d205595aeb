"""Shared renderer for terminal schedule tables.

Used by ``classes list`` and by the interactive dashboards.
"""

from typing import Iterable

from rich import box
from rich.table import Table

from models.class_session import ClassSession

# (header, attribute) in display order
ALL_COLUMNS = [
    ("ID", "id"),
    ("TID", "teacher_id"),
    ("Teacher", "teacher_name"),
    ("Department", "department"),
    ("Batch", "batch"),
    ("Course", "course"),
    ("Room", "room"),
    ("Date", "class_date"),
    ("Start", "start_time"),
    ("End", "end_time"),
]

# Students do not need the owner id
STUDENT_COLUMNS = [c for c in ALL_COLUMNS if c[1] not in ("teacher_id",)]


def render_session_rows(
    sessions: Iterable[ClassSession],
    columns: list[tuple[str, str]] = ALL_COLUMNS,
) -> list[list[str]]:
    """Table rows as strings, one row per class, in the given order."""
    return [
        ["" if getattr(s, attr) is None else str(getattr(s, attr)) for _, attr in columns]
        for s in sessions
    ]


def build_session_table(
    sessions: list[ClassSession],
    title: str,
    columns: list[tuple[str, str]] = ALL_COLUMNS,
) -> Table:
    """rich table of classes. An empty list renders a single placeholder row."""
    table = Table(title=title, box=box.ROUNDED)
    for header, attr in columns:
        table.add_column(header, style="bold" if attr == "id" else None)
    rows = render_session_rows(sessions, columns)
    if not rows:
        table.add_row("[dim]No classes scheduled.[/dim]", *[""] * (len(columns) - 1))
    for row in rows:
        table.add_row(*row)
    return table
