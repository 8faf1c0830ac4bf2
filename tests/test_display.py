"""Tests for task detail and table rendering."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from sticky_board.task_engine.display import format_task_detail, format_tasks_table, task_board_label
from sticky_board.task_engine.model import Task


class TestTaskBoardLabel:
    def test_prefers_name_then_id(self) -> None:
        assert task_board_label(Task(board_id="work", board_name="Work")) == "Work"
        assert task_board_label(Task(board_id="work", board_name="  ")) == "work"
        assert task_board_label(Task()) == "unknown"


class TestFormatTaskDetail:
    def test_full_detail(self) -> None:
        task = Task(
            id="T-000001",
            uid="u-1",
            title="Write docs",
            status="todo",
            priority=0,
            tags=["docs", "ui"],
            created=date(2026, 1, 5),
            depends_on=["T-000002"],
            content="Body",
            file_path=Path("/store/T-000001.md"),
            board_name="Default",
        )
        assert format_task_detail(task) == (
            "Board: Default\n"
            "ID: T-000001\n"
            "UID: u-1\n"
            "Title: Write docs\n"
            "Status: todo\n"
            "Priority: 2\n"
            "Tags: docs, ui\n"
            "Depends On: T-000002\n"
            "Created: 2026-01-05\n"
            "Path: /store/T-000001.md\n"
            "\n"
            "Body\n"
        )

    def test_blank_values_skipped(self) -> None:
        text = format_task_detail(Task(id="T-1", title="x"))
        assert "UID" not in text
        assert "Tags" not in text
        assert "Created" not in text
        assert "Path" not in text
        assert text.endswith("Priority: 2\n")


class TestFormatTasksTable:
    def test_table_contents(self) -> None:
        tasks = [
            Task(id="T-000001", title="Write [docs]", status="todo", priority=3, tags=["a", "b"], created=date(2026, 1, 5)),
            Task(id="T-000002", title="Undated", status="doing"),
        ]
        text = format_tasks_table(tasks)
        lines = text.splitlines()

        for header in ("ID", "Title", "Status", "Priority", "Tags", "Created"):
            assert header in lines[1]
        assert "Write [docs]" in text
        assert "a, b" in text
        assert "2026-01-05" in text
        assert any("T-000002" in line and "2" in line for line in lines)
        assert "\x1b[" not in text

    def test_empty_table_has_headers(self) -> None:
        assert "Title" in format_tasks_table([])
