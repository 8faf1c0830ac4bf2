"""Plain-text renderings of tasks for CLI and log output."""

from __future__ import annotations

import io
from typing import Iterable

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .model import Task

TABLE_HEADERS = ("ID", "Title", "Status", "Priority", "Tags", "Created")


def task_board_label(task: Task) -> str:
    """Return the board name, then the board ID, then ``"unknown"``."""
    return task.board_name.strip() or task.board_id.strip() or "unknown"


def format_task_detail(task: Task) -> str:
    """Render labelled metadata lines followed by the task body.

    Blank values are skipped.  The body, when present, follows an empty line
    and always ends with a newline.
    """
    lines: list[str] = []

    def add(label: str, value: str) -> None:
        if value.strip():
            lines.append(f"{label}: {value}")

    add("Board", task_board_label(task))
    add("ID", task.id)
    add("UID", task.uid)
    add("Title", task.title)
    add("Status", task.status)
    add("Priority", str(task.effective_priority))
    add("Tags", ", ".join(task.tags))
    add("Depends On", ", ".join(task.depends_on))
    add("Created", task.describe_created())
    add("Path", str(task.file_path) if task.file_path else "")

    out = "".join(f"{line}\n" for line in lines)
    if task.content.strip():
        out += "\n" + task.content
        if not task.content.endswith("\n"):
            out += "\n"
    return out


def format_tasks_table(tasks: Iterable[Task]) -> str:
    """Render tasks as an ASCII table (no colour, no wrapping)."""
    table = Table(box=box.ASCII, show_lines=False)
    for header in TABLE_HEADERS:
        table.add_column(header, no_wrap=True)
    for task in tasks:
        table.add_row(
            Text(task.id),
            Text(task.title),
            Text(task.status),
            Text(str(task.effective_priority)),
            Text(", ".join(task.tags)),
            Text(task.describe_created()),
        )

    console = Console(
        file=io.StringIO(),
        record=True,
        width=2000,
        color_system=None,
        force_terminal=False,
    )
    console.print(table)
    return console.export_text().rstrip("\n")
