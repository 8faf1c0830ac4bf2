"""Board registry records and the ID helpers shared by the registry manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import PurePosixPath
from typing import Any, Optional

from ..constants import BOARDS_DIR, FALLBACK_BOARD_SLUG
from ..errors import BoardNotFoundError, InvalidBoardIDError
from ..utils import _parse_date, slugify


@dataclass
class Board:
    id: str
    name: str = ""
    path: str = ""
    archived: bool = False
    created: Optional[date] = None

    @property
    def relative_dir(self) -> str:
        """Board directory relative to the storage root."""
        return self.path.strip() or default_board_path(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "archived": self.archived,
            "created": self.created if self.created is not None else "",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        try:
            created = _parse_date(data.get("created"))
        except ValueError:
            created = None
        return cls(
            id=str(data.get("id") or "").strip(),
            name=str(data.get("name") or ""),
            path=str(data.get("path") or ""),
            archived=bool(data.get("archived", False)),
            created=created,
        )


@dataclass
class BoardRegistry:
    """Contents of ``boards/boards.yaml``: every board plus the active one."""

    active: str = ""
    boards: list[Board] = field(default_factory=list)

    def ids(self) -> list[str]:
        return [b.id for b in self.boards]

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "boards": [b.to_dict() for b in self.boards],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardRegistry":
        boards = [Board.from_dict(raw) for raw in data.get("boards") or [] if isinstance(raw, dict)]
        return cls(active=str(data.get("active") or "").strip(), boards=boards)


def default_board_path(board_id: str) -> str:
    return str(PurePosixPath(BOARDS_DIR) / board_id)


def validate_board_id(board_id: str) -> None:
    if not board_id or not board_id.strip():
        raise InvalidBoardIDError("board id is empty")
    if "/" in board_id or "\\" in board_id:
        raise InvalidBoardIDError(f"board id {board_id!r} contains a path separator")


def find_board(registry: BoardRegistry, board_id: str) -> Board:
    target = board_id.strip()
    for board in registry.boards:
        if board.id == target:
            return board
    raise BoardNotFoundError(f"board {target!r} not found")


def generate_board_id(name: str, existing: list[Board]) -> str:
    """Slugify *name* and append ``-1``, ``-2``, ... until the ID is unused."""
    base = slugify(name) or FALLBACK_BOARD_SLUG
    taken = {b.id for b in existing}
    candidate = base
    suffix = 1
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def first_active_board(boards: list[Board], skip_id: str = "") -> str:
    """Return the first non-archived board other than *skip_id*.

    Falls back to any board other than *skip_id*, then to ``""``.
    """
    for board in boards:
        if board.id != skip_id and not board.archived:
            return board.id
    for board in boards:
        if board.id != skip_id:
            return board.id
    return ""
