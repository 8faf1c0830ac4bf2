"""Per-board configuration: status columns, ID counter and board context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import CONFIG_VERSION, DEFAULT_COLUMNS


@dataclass
class Column:
    """A display workflow stage.  Advisory only; task statuses are free-form."""

    key: str
    title: str = ""


@dataclass
class BoardContext:
    scope: str = ""
    owners: list[str] = field(default_factory=list)
    release: str = ""
    target: str = ""
    notes: str = ""

    def normalized(self) -> "BoardContext":
        return BoardContext(
            scope=self.scope.strip(),
            owners=[o.strip() for o in self.owners if o and o.strip()],
            release=self.release.strip(),
            target=self.target.strip(),
            notes=self.notes.strip(),
        )

    def is_empty(self) -> bool:
        return not (self.scope or self.owners or self.release or self.target or self.notes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key in ("scope", "owners", "release", "target", "notes"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "BoardContext":
        if not isinstance(data, dict):
            return cls()
        owners = data.get("owners") or []
        if isinstance(owners, str):
            owners = [owners]
        return cls(
            scope=str(data.get("scope") or ""),
            owners=[str(o) for o in owners],
            release=str(data.get("release") or ""),
            target=str(data.get("target") or ""),
            notes=str(data.get("notes") or ""),
        )


def default_columns() -> list[Column]:
    return [Column(key=key, title=title) for key, title in DEFAULT_COLUMNS]


@dataclass
class BoardConfig:
    """Contents of ``boards/<board>/config.yaml``.

    ``next_id`` is the counter behind sequential task IDs; it only ever
    grows, so deleted IDs are never handed out again.
    """

    config_version: int = CONFIG_VERSION
    next_id: int = 1
    columns: list[Column] = field(default_factory=default_columns)
    context: BoardContext = field(default_factory=BoardContext)

    def normalized(self) -> "BoardConfig":
        """Return a copy with version/counter floors and cleaned columns."""
        columns: list[Column] = []
        seen: set[str] = set()
        for column in self.columns:
            key = (column.key or "").strip()
            if not key or key.lower() in seen:
                continue
            seen.add(key.lower())
            columns.append(Column(key=key, title=(column.title or "").strip() or key))
        return BoardConfig(
            config_version=self.config_version if self.config_version > 0 else CONFIG_VERSION,
            next_id=self.next_id if self.next_id > 0 else 1,
            columns=columns or default_columns(),
            context=self.context,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "config_version": self.config_version,
            "next_id": self.next_id,
            "columns": [{"key": c.key, "title": c.title} for c in self.columns],
        }
        if not self.context.is_empty():
            data["context"] = self.context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardConfig":
        """Deserialize leniently; missing or malformed fields fall back to defaults."""
        columns: list[Column] = []
        for raw in data.get("columns") or []:
            if isinstance(raw, dict):
                columns.append(Column(key=str(raw.get("key") or ""), title=str(raw.get("title") or "")))
        return cls(
            config_version=_as_int(data.get("config_version"), CONFIG_VERSION),
            next_id=_as_int(data.get("next_id"), 1),
            columns=columns,
            context=BoardContext.from_dict(data.get("context")),
        )


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
