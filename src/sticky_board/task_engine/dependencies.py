"""Dependency graph checks over the tasks of one board."""

from __future__ import annotations

from typing import Iterable, Mapping

from ..constants import DONE_STATUSES
from ..errors import InvalidDependencyError
from ..utils import slugify
from .model import Task, normalize_ids

_UNSEEN, _VISITING, _DONE = 0, 1, 2


def validate_no_cycles(tasks: Iterable[Task]) -> None:
    """Raise :class:`InvalidDependencyError` if ``depends_on`` edges form a cycle.

    Depth-first search with three-state marking over every task.  Edges to
    IDs that are not in *tasks* are ignored here; they only make the
    dependent task not ready.
    """
    graph: dict[str, list[str]] = {t.id: normalize_ids(t.depends_on) for t in tasks}
    state: dict[str, int] = {}

    for root in graph:
        if state.get(root, _UNSEEN) != _UNSEEN:
            continue
        state[root] = _VISITING
        stack = [(root, iter(graph[root]))]
        while stack:
            node, edges = stack[-1]
            advanced = False
            for dep in edges:
                dep_state = state.get(dep, _UNSEEN)
                if dep_state == _VISITING:
                    raise InvalidDependencyError(f"dependency cycle detected at {dep}", task_id=dep)
                if dep_state == _UNSEEN:
                    state[dep] = _VISITING
                    stack.append((dep, iter(graph.get(dep, ()))))
                    advanced = True
                    break
            if not advanced:
                state[node] = _DONE
                stack.pop()


def is_done_status(status: str) -> bool:
    return slugify(status or "") in DONE_STATUSES


def is_ready(task: Task, index: Mapping[str, Task]) -> tuple[bool, list[str]]:
    """Return ``(ready, unmet)`` where *unmet* lists missing or unfinished dependencies."""
    unmet = [
        dep
        for dep in task.depends_on
        if dep not in index or not is_done_status(index[dep].status)
    ]
    return not unmet, unmet
