"""Filtering and sorting for task listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable, Optional

from .model import Task

TAG_MODE_ANY = "any"
TAG_MODE_ALL = "all"

_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "id": lambda t: t.id,
    "status": lambda t: t.status.lower(),
    "created": lambda t: t.created or date.min,
    "priority": lambda t: (t.effective_priority, t.title.lower()),
    "title": lambda t: t.title.lower(),
}


@dataclass
class ListOptions:
    """Criteria for :func:`filter_and_sort_tasks`.

    Blank strings and ``None`` disable the corresponding filter.  ``from_date``
    and ``to_date`` are inclusive.  An unknown ``sort_by`` sorts by ID; an
    empty one keeps the input order.
    """

    status: str = ""
    title: str = ""
    tags: list[str] = field(default_factory=list)
    tag_mode: str = TAG_MODE_ANY
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    sort_by: str = ""
    desc: bool = False

    def has_filters(self) -> bool:
        return bool(
            self.status.strip()
            or self.title.strip()
            or _tag_filters(self.tags)
            or self.from_date
            or self.to_date
        )


def filter_and_sort_tasks(tasks: Iterable[Task], options: Optional[ListOptions] = None) -> list[Task]:
    options = options or ListOptions()
    result = [t for t in tasks if _matches(t, options)] if options.has_filters() else list(tasks)

    sort_by = options.sort_by.strip().lower()
    if sort_by:
        key = _SORT_KEYS.get(sort_by, _SORT_KEYS["id"])
        result.sort(key=key, reverse=options.desc)
    return result


def _tag_filters(tags: Iterable[str]) -> list[str]:
    return [t.strip().lower() for t in tags if t and t.strip()]


def _matches(task: Task, options: ListOptions) -> bool:
    status = options.status.strip().lower()
    if status and task.status.lower() != status:
        return False
    title = options.title.strip().lower()
    if title and title not in task.title.lower():
        return False
    filters = _tag_filters(options.tags)
    if filters and not _matches_tags(task.tags, filters, options.tag_mode.strip().lower()):
        return False
    return _matches_date_range(task.created, options.from_date, options.to_date)


def _matches_tags(task_tags: list[str], filters: list[str], mode: str) -> bool:
    tag_set = {t.strip().lower() for t in task_tags if t and t.strip()}
    if not tag_set:
        return False
    if mode == TAG_MODE_ALL:
        return all(f in tag_set for f in filters)
    return any(f in tag_set for f in filters)


def _matches_date_range(value: Optional[date], start: Optional[date], end: Optional[date]) -> bool:
    if value is None:
        return start is None and end is None
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
