"""Tests for list filtering and sorting."""

from __future__ import annotations

from datetime import date

import pytest

from sticky_board.task_engine.list_options import ListOptions, filter_and_sort_tasks
from sticky_board.task_engine.model import Task


@pytest.fixture
def tasks() -> list[Task]:
    return [
        Task(id="T-000003", title="Write docs", status="todo", priority=3, tags=["docs"], created=date(2026, 1, 3)),
        Task(id="T-000001", title="Fix login", status="Doing", priority=1, tags=["auth", "ui"], created=date(2026, 1, 1)),
        Task(id="T-000002", title="Add logout", status="todo", priority=0, tags=["Auth"], created=None),
        Task(id="T-000004", title="Fix header", status="done", priority=1, tags=[], created=date(2026, 1, 10)),
    ]


def _ids(result: list[Task]) -> list[str]:
    return [t.id for t in result]


class TestFilters:
    def test_no_options_keeps_order(self, tasks: list[Task]) -> None:
        assert _ids(filter_and_sort_tasks(tasks)) == ["T-000003", "T-000001", "T-000002", "T-000004"]

    def test_status_case_insensitive(self, tasks: list[Task]) -> None:
        assert _ids(filter_and_sort_tasks(tasks, ListOptions(status="doing"))) == ["T-000001"]

    def test_title_substring(self, tasks: list[Task]) -> None:
        assert _ids(filter_and_sort_tasks(tasks, ListOptions(title="FIX"))) == ["T-000001", "T-000004"]

    def test_tags_any(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(tags=["auth", "docs"]))
        assert _ids(result) == ["T-000003", "T-000001", "T-000002"]

    def test_tags_all(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(tags=["auth", "UI"], tag_mode="all"))
        assert _ids(result) == ["T-000001"]

    def test_date_range(self, tasks: list[Task]) -> None:
        options = ListOptions(from_date=date(2026, 1, 2), to_date=date(2026, 1, 10))
        assert _ids(filter_and_sort_tasks(tasks, options)) == ["T-000003", "T-000004"]

    def test_undated_tasks_only_match_without_range(self, tasks: list[Task]) -> None:
        assert "T-000002" in _ids(filter_and_sort_tasks(tasks, ListOptions(status="todo")))
        assert "T-000002" not in _ids(filter_and_sort_tasks(tasks, ListOptions(to_date=date(2030, 1, 1))))


class TestSorting:
    def test_sort_by_id(self, tasks: list[Task]) -> None:
        assert _ids(filter_and_sort_tasks(tasks, ListOptions(sort_by="id"))) == [
            "T-000001", "T-000002", "T-000003", "T-000004",
        ]

    def test_unknown_key_sorts_by_id(self, tasks: list[Task]) -> None:
        assert _ids(filter_and_sort_tasks(tasks, ListOptions(sort_by="bogus")))[0] == "T-000001"

    def test_sort_by_priority_ties_by_title(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(sort_by="priority"))
        assert _ids(result) == ["T-000004", "T-000001", "T-000002", "T-000003"]

    def test_sort_by_created_desc(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(sort_by="created", desc=True))
        assert _ids(result) == ["T-000004", "T-000003", "T-000001", "T-000002"]

    def test_sort_by_title(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(sort_by="title"))
        assert [t.title for t in result] == ["Add logout", "Fix header", "Fix login", "Write docs"]

    def test_sort_by_status(self, tasks: list[Task]) -> None:
        result = filter_and_sort_tasks(tasks, ListOptions(sort_by="STATUS"))
        assert [t.status.lower() for t in result] == ["doing", "done", "todo", "todo"]

    def test_input_not_mutated(self, tasks: list[Task]) -> None:
        before = _ids(tasks)
        filter_and_sort_tasks(tasks, ListOptions(sort_by="id", desc=True))
        assert _ids(tasks) == before
