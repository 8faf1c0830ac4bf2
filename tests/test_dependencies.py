"""Tests for dependency cycle detection and readiness."""

from __future__ import annotations

import pytest

from sticky_board.errors import InvalidDependencyError
from sticky_board.task_engine.dependencies import is_done_status, is_ready, validate_no_cycles
from sticky_board.task_engine.model import Task


def _t(task_id: str, *deps: str, status: str = "todo") -> Task:
    return Task(id=task_id, title=task_id, status=status, depends_on=list(deps))


class TestValidateNoCycles:
    def test_acyclic_graph(self) -> None:
        validate_no_cycles([_t("A"), _t("B", "A"), _t("C", "A", "B")])

    def test_missing_targets_are_not_errors(self) -> None:
        validate_no_cycles([_t("A", "ghost")])

    def test_two_node_cycle(self) -> None:
        with pytest.raises(InvalidDependencyError) as excinfo:
            validate_no_cycles([_t("A", "B"), _t("B", "A")])
        assert excinfo.value.task_id == "A"
        assert "cycle" in str(excinfo.value)

    def test_self_loop(self) -> None:
        with pytest.raises(InvalidDependencyError):
            validate_no_cycles([_t("A", "A")])

    def test_long_chain_does_not_recurse(self) -> None:
        tasks = [_t(f"T{i}", f"T{i + 1}") for i in range(5000)]
        validate_no_cycles(tasks)
        tasks.append(_t("T5000", "T0"))
        with pytest.raises(InvalidDependencyError):
            validate_no_cycles(tasks)


class TestReadiness:
    @pytest.mark.parametrize("status", ["done", "Done", " DONE ", "archived"])
    def test_done_statuses(self, status: str) -> None:
        assert is_done_status(status)

    @pytest.mark.parametrize("status", ["todo", "doing", "", "done-ish"])
    def test_not_done_statuses(self, status: str) -> None:
        assert not is_done_status(status)

    def test_is_ready(self) -> None:
        done = _t("A", status="done")
        pending = _t("B")
        index = {t.id: t for t in (done, pending)}

        assert is_ready(_t("C", "A"), index) == (True, [])
        assert is_ready(_t("D", "A", "B", "ghost"), index) == (False, ["B", "ghost"])
        assert is_ready(_t("E"), index) == (True, [])
