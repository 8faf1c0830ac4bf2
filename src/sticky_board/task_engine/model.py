"""Task model for the file-backed board store.

A task lives in its own Markdown file: the YAML header mirrors the persisted
fields (``id`` .. ``depends_on``) and the body holds ``content``.  The
``file_path``/``board_*`` attributes are runtime metadata stamped on by the
repository after reading and are never written back to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from ..constants import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    MAX_PRIORITY,
    MIN_PRIORITY,
    TASK_ID_PREFIX,
    TASK_ID_WIDTH,
)
from ..errors import InvalidHeaderError, InvalidIDError, InvalidPriorityError, InvalidTitleError
from ..utils import _format_date, _parse_date


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------

def normalize_priority(value: int) -> int:
    """Map 0 ("unset") to the default and reject anything outside 1-3."""
    if value == 0:
        return DEFAULT_PRIORITY
    if value < MIN_PRIORITY or value > MAX_PRIORITY:
        raise InvalidPriorityError(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {value}")
    return value


def effective_priority(value: int) -> int:
    return DEFAULT_PRIORITY if value == 0 else value


def normalize_tags(values: Iterable[str]) -> list[str]:
    """Split on commas, trim, drop empties and de-dupe case-insensitively.

    The first spelling of a tag wins and keeps its position.
    """
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        for tag in str(value).split(","):
            trimmed = tag.strip()
            if not trimmed:
                continue
            key = trimmed.lower()
            if key in seen:
                continue
            seen.add(key)
            out.append(trimmed)
    return out


def parse_tags(text: str) -> list[str]:
    """Parse a comma-separated tag string such as ``"ui, backend"``."""
    if not text.strip():
        return []
    return normalize_tags([text])


def normalize_ids(ids: Optional[Iterable[str]]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for raw in ids or ():
        trimmed = str(raw).strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        out.append(trimmed)
    return out


def validate_id(task_id: str) -> None:
    if not task_id or not task_id.strip():
        raise InvalidIDError("task id is empty")
    if "/" in task_id or "\\" in task_id:
        raise InvalidIDError(f"task id {task_id!r} contains a path separator")


def validate_title(title: str) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise InvalidTitleError("title must not be empty")
    return trimmed


def format_sequential_id(value: int) -> str:
    return f"{TASK_ID_PREFIX}{value:0{TASK_ID_WIDTH}d}"


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A work item persisted under ``boards/<board>/tasks/<id>.md``."""

    id: str = ""
    uid: str = ""
    title: str = ""
    status: str = DEFAULT_STATUS
    priority: int = 0  # 0 = unset, normalized to DEFAULT_PRIORITY on create
    tags: list[str] = field(default_factory=list)
    created: Optional[date] = None
    depends_on: list[str] = field(default_factory=list)
    content: str = ""

    # Runtime metadata (not persisted)
    file_path: Optional[Path] = field(default=None, compare=False)
    board_id: str = field(default="", compare=False)
    board_name: str = field(default="", compare=False)

    @property
    def effective_priority(self) -> int:
        return effective_priority(self.priority)

    # ------------------------------------------------------------------
    # Header (de)serialization
    # ------------------------------------------------------------------

    def to_header(self) -> dict[str, Any]:
        """Return the YAML header mapping in on-disk key order."""
        header: dict[str, Any] = {"id": self.id}
        if self.uid:
            header["uid"] = self.uid
        header["title"] = self.title
        header["status"] = self.status
        header["priority"] = self.priority
        header["tags"] = list(self.tags)
        header["created"] = self.created if self.created is not None else ""
        header["depends_on"] = normalize_ids(self.depends_on)
        return header

    @classmethod
    def from_header(cls, header: dict[str, Any], content: str = "") -> "Task":
        """Build a task from a decoded header, raising :class:`InvalidHeaderError` on bad shapes."""
        try:
            created = _parse_date(header.get("created"))
        except ValueError as exc:
            raise InvalidHeaderError(f"failed to parse created date {header.get('created')!r}") from exc
        return cls(
            id=_header_str(header, "id"),
            uid=_header_str(header, "uid"),
            title=_header_str(header, "title"),
            status=_header_str(header, "status"),
            priority=_header_int(header, "priority"),
            tags=_header_list(header, "tags"),
            created=created,
            depends_on=normalize_ids(_header_list(header, "depends_on")),
            content=content,
        )

    def describe_created(self) -> str:
        return _format_date(self.created)


def new_task(title: str, **fields: Any) -> Task:
    """Create an unsaved task with a trimmed title and the default status/priority."""
    fields.setdefault("status", DEFAULT_STATUS)
    fields.setdefault("priority", DEFAULT_PRIORITY)
    return Task(title=validate_title(title), **fields)


def _header_str(header: dict[str, Any], key: str) -> str:
    value = header.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise InvalidHeaderError(f"header field {key!r} must be a string")
    return str(value)


def _header_int(header: dict[str, Any], key: str) -> int:
    value = header.get(key)
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidHeaderError(f"header field {key!r} must be an integer, got {value!r}")
    return value


def _header_list(header: dict[str, Any], key: str) -> list[str]:
    value = header.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidHeaderError(f"header field {key!r} must be a list")
    out: list[str] = []
    for item in value:
        if isinstance(item, (dict, list)) or item is None:
            raise InvalidHeaderError(f"header field {key!r} must contain strings")
        out.append(str(item))
    return out
