"""Exception types raised by the board/task store.

Every error carries a ``kind`` string so callers that dispatch on the kind
(for example a remote procedure shim mapping errors to codes) do not need to
import each class.  Validation errors also derive from :class:`ValueError`
and lookups from :class:`LookupError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class StickyBoardError(Exception):
    """Base class for all store errors."""

    kind = "error"

    def __init__(self, message: str = "", *, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(message or self.kind.replace("_", " "))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class InvalidIDError(StickyBoardError, ValueError):
    """Task ID is empty or contains a path separator."""

    kind = "invalid_id"


class InvalidTitleError(StickyBoardError, ValueError):
    kind = "invalid_title"


class InvalidPriorityError(StickyBoardError, ValueError):
    kind = "invalid_priority"


class InvalidDependencyError(StickyBoardError, ValueError):
    """Dependency ID is malformed or the dependency would introduce a cycle."""

    kind = "invalid_dependency"

    def __init__(self, message: str = "", *, task_id: Optional[str] = None) -> None:
        self.task_id = task_id
        super().__init__(message)


class InvalidBoardIDError(StickyBoardError, ValueError):
    kind = "invalid_board_id"


class BoardDeleteForbiddenError(StickyBoardError):
    """Deleting the board would leave the registry empty."""

    kind = "board_delete_forbidden"


# ---------------------------------------------------------------------------
# Lookup / state
# ---------------------------------------------------------------------------

class TaskNotFoundError(StickyBoardError, LookupError):
    kind = "task_not_found"


class BoardNotFoundError(StickyBoardError, LookupError):
    kind = "board_not_found"


class StoreNotInitializedError(StickyBoardError):
    """An expected store directory or file is absent."""

    kind = "store_not_initialized"


class InvalidPathError(StickyBoardError):
    """A resolved path escapes its owning directory or collides with existing data."""

    kind = "invalid_path"


class LegacyMigrationError(InvalidPathError):
    """The legacy single-board layout cannot be moved without overwriting data."""

    kind = "legacy_migration"


# ---------------------------------------------------------------------------
# Encoding / I/O
# ---------------------------------------------------------------------------

class FrontmatterError(StickyBoardError, ValueError):
    kind = "frontmatter"


class InvalidFrontmatterError(FrontmatterError):
    """Opening delimiter missing or header block never closed."""

    kind = "invalid_frontmatter"


class InvalidHeaderError(FrontmatterError):
    """Header block could not be decoded into task fields."""

    kind = "invalid_header"


class TaskFileError(StickyBoardError):
    """A task file on disk could not be parsed."""

    kind = "task_file"


class StorageError(StickyBoardError):
    """Filesystem or encoding failure, wrapped with the operation and path."""

    kind = "storage"

    def __init__(self, operation: str, path: Optional[Path], cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"failed to {operation} {path}: {cause}", path=path)


class OperationCanceled(StickyBoardError):
    """Cooperative abort requested through a :class:`~sticky_board.cancel.CancelToken`."""

    kind = "canceled"


def is_canceled(exc: BaseException) -> bool:
    """Return True for cancellation, which callers usually treat as non-fatal."""
    return isinstance(exc, OperationCanceled)
