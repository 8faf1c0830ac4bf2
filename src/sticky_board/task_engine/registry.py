"""Board registry manager.

Owns ``boards/boards.yaml`` under the storage root and the per-board
directory scaffolding.  Initialization is idempotent and driven by existence
checks: every public operation first makes sure the registry exists,
migrating the older single-board layout (``<root>/tasks`` plus
``<root>/config.yaml``) into ``boards/default/`` when it finds one.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..cancel import CancelToken, check_canceled
from ..config import StoreSettings
from ..constants import (
    ARCHIVE_DIR,
    BOARD_CONFIG_FILE,
    DEFAULT_BOARD_ID,
    DEFAULT_BOARD_NAME,
    REGISTRY_FILE,
    TASKS_DIR,
)
from ..errors import (
    BoardDeleteForbiddenError,
    BoardNotFoundError,
    InvalidTitleError,
    LegacyMigrationError,
    StorageError,
    StoreNotInitializedError,
)
from ..io_utils import _atomic_write_yaml, _load_yaml, ensure_in_dir, path_exists
from ..locks import ReadWriteLock
from ..utils import _today
from .boards import (
    Board,
    BoardRegistry,
    default_board_path,
    find_board,
    first_active_board,
    generate_board_id,
    validate_board_id,
)
from .config import BoardConfig
from .repository import TaskRepository


@dataclass(frozen=True)
class BoardPaths:
    board: Board
    root: Path
    tasks_dir: Path
    config_path: Path


class BoardRegistryManager:
    """Create, rename, archive, delete and select boards under one storage root."""

    def __init__(
        self,
        storage_root: Path,
        settings: Optional[StoreSettings] = None,
        *,
        today: Callable[[], date] = _today,
    ) -> None:
        self.storage_root = Path(os.path.abspath(storage_root))
        self.settings = settings or StoreSettings()
        self.registry_path = self._pick_registry_path()
        self._lock = ReadWriteLock()
        self._today = today

    def _pick_registry_path(self) -> Path:
        path = self.settings.registry_path(self.storage_root)
        if self.settings.boards_registry:
            return path
        # Stores written before boards/ existed kept the registry at the root.
        legacy = self.storage_root / REGISTRY_FILE
        if not path_exists(path) and path_exists(legacy):
            return legacy
        return path

    # ------------------------------------------------------------------
    # Initialization and legacy migration
    # ------------------------------------------------------------------

    def ensure_initialized(self, *, cancel: Optional[CancelToken] = None) -> None:
        """Migrate or scaffold the store so a registry and its active board exist."""
        check_canceled(cancel)
        # Fast path; re-checked under the write lock.
        if path_exists(self.registry_path):
            return
        with self._lock.write():
            self._ensure_initialized(cancel)

    def migrate_legacy_layout(self, *, cancel: Optional[CancelToken] = None) -> bool:
        """Move a single-board store into ``boards/default/``.

        Returns False when there is nothing to migrate.  Refuses with
        :class:`LegacyMigrationError` rather than merging into existing data.
        """
        with self._lock.write():
            return self._migrate_legacy_layout(cancel)

    def _ensure_initialized(self, cancel: Optional[CancelToken]) -> None:
        check_canceled(cancel)
        if path_exists(self.registry_path):
            return
        self._migrate_legacy_layout(cancel)
        if not path_exists(self.registry_path):
            board = self._new_board(DEFAULT_BOARD_ID, DEFAULT_BOARD_NAME)
            self._save_registry(BoardRegistry(active=board.id, boards=[board]), cancel)
            logger.info("Initialized board registry at {}", self.registry_path)
        registry = self._load_registry(cancel)
        self._scaffold_board(find_board(registry, registry.active or DEFAULT_BOARD_ID), cancel)

    def _migrate_legacy_layout(self, cancel: Optional[CancelToken]) -> bool:
        legacy_tasks = self.storage_root / TASKS_DIR
        legacy_config = self.storage_root / BOARD_CONFIG_FILE
        check_canceled(cancel)
        if path_exists(self.registry_path):
            return False
        has_tasks = legacy_tasks.is_dir()
        has_config = path_exists(legacy_config)
        if not has_tasks and not has_config:
            return False

        board = self._new_board(DEFAULT_BOARD_ID, DEFAULT_BOARD_NAME)
        board_dir = self._board_dir(board)
        tasks_dir = board_dir / TASKS_DIR
        config_path = board_dir / BOARD_CONFIG_FILE
        logger.warning("Migrating legacy single-board layout in {} to {}", self.storage_root, board_dir)

        check_canceled(cancel)
        self._mkdir(board_dir)
        if has_tasks:
            check_canceled(cancel)
            if path_exists(tasks_dir):
                raise LegacyMigrationError(f"cannot migrate legacy tasks: {tasks_dir} already exists", path=tasks_dir)
            self._rename(legacy_tasks, tasks_dir)
        if has_config:
            check_canceled(cancel)
            if path_exists(config_path):
                raise LegacyMigrationError(
                    f"cannot migrate legacy config: {config_path} already exists", path=config_path
                )
            self._rename(legacy_config, config_path)

        self._save_registry(BoardRegistry(active=board.id, boards=[board]), cancel)
        logger.info("Migrated legacy layout into board {}", board.id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def load_registry(self, *, cancel: Optional[CancelToken] = None) -> BoardRegistry:
        self.ensure_initialized(cancel=cancel)
        with self._lock.read():
            return self._load_registry(cancel)

    def list_boards(self, *, cancel: Optional[CancelToken] = None) -> tuple[list[Board], str]:
        registry = self.load_registry(cancel=cancel)
        return registry.boards, registry.active

    def resolve_board_paths(self, board_id: str = "", *, cancel: Optional[CancelToken] = None) -> BoardPaths:
        """Resolve a board's directories; a blank ID means the active board."""
        registry = self.load_registry(cancel=cancel)
        target = board_id.strip() or registry.active
        board = find_board(registry, target)
        root = self._board_dir(board)
        return BoardPaths(
            board=board,
            root=root,
            tasks_dir=root / TASKS_DIR,
            config_path=root / BOARD_CONFIG_FILE,
        )

    def open_repository(self, board_id: str = "", *, cancel: Optional[CancelToken] = None) -> TaskRepository:
        paths = self.resolve_board_paths(board_id, cancel=cancel)
        return TaskRepository(paths.root, paths.board.id, paths.board.name, today=self._today)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, name: str, *, cancel: Optional[CancelToken] = None) -> Board:
        trimmed = (name or "").strip()
        if not trimmed:
            raise InvalidTitleError("board name must not be empty")
        self.ensure_initialized(cancel=cancel)
        with self._lock.write():
            registry = self._load_registry(cancel)
            board = self._new_board(generate_board_id(trimmed, registry.boards), trimmed)
            registry.boards.append(board)
            if not registry.active:
                registry.active = board.id
            self._save_registry(registry, cancel)
            self._scaffold_board(board, cancel)
            logger.info("Created board {} ({})", board.id, board.name)
            return board

    def rename(self, board_id: str, name: str, *, cancel: Optional[CancelToken] = None) -> Board:
        validate_board_id(board_id)
        trimmed = (name or "").strip()
        if not trimmed:
            raise InvalidTitleError("board name must not be empty")
        self.ensure_initialized(cancel=cancel)
        with self._lock.write():
            registry = self._load_registry(cancel)
            board = find_board(registry, board_id)
            board.name = trimmed
            self._save_registry(registry, cancel)
            logger.info("Renamed board {} to {}", board.id, trimmed)
            return board

    def set_active(self, board_id: str, *, cancel: Optional[CancelToken] = None) -> None:
        validate_board_id(board_id)
        self.ensure_initialized(cancel=cancel)
        with self._lock.write():
            registry = self._load_registry(cancel)
            board = find_board(registry, board_id)
            registry.active = board.id
            self._save_registry(registry, cancel)
            logger.info("Active board is now {}", board.id)

    def archive(self, board_id: str, *, cancel: Optional[CancelToken] = None) -> Board:
        """Flag a board as archived; the active board moves to another board if possible."""
        validate_board_id(board_id)
        self.ensure_initialized(cancel=cancel)
        with self._lock.write():
            registry = self._load_registry(cancel)
            board = find_board(registry, board_id)
            board.archived = True
            if registry.active == board.id:
                replacement = first_active_board(registry.boards, board.id)
                if replacement:
                    registry.active = replacement
            self._save_registry(registry, cancel)
            logger.info("Archived board {}", board.id)
            return board

    def delete(self, board_id: str, *, cancel: Optional[CancelToken] = None) -> None:
        """Remove a board from the registry and erase its directory tree."""
        validate_board_id(board_id)
        self.ensure_initialized(cancel=cancel)
        with self._lock.write():
            registry = self._load_registry(cancel)
            if len(registry.boards) <= 1:
                raise BoardDeleteForbiddenError("cannot delete the last board")
            target = find_board(registry, board_id)
            registry.boards = [b for b in registry.boards if b.id != target.id]
            if registry.active == target.id:
                registry.active = first_active_board(registry.boards)
            board_dir = self._board_dir(target)
            self._save_registry(registry, cancel)

            check_canceled(cancel)
            try:
                shutil.rmtree(board_dir)
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise StorageError("delete board data", board_dir, exc) from exc
            logger.info("Deleted board {} and {}", target.id, board_dir)

    # ------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _new_board(self, board_id: str, name: str) -> Board:
        validate_board_id(board_id)
        return Board(
            id=board_id,
            name=name,
            path=default_board_path(board_id),
            archived=False,
            created=self._today(),
        )

    def _board_dir(self, board: Board) -> Path:
        return ensure_in_dir(self.storage_root, self.storage_root / board.relative_dir)

    def _scaffold_board(self, board: Board, cancel: Optional[CancelToken]) -> None:
        board_dir = self._board_dir(board)
        for directory in (board_dir / TASKS_DIR, board_dir / ARCHIVE_DIR / TASKS_DIR):
            check_canceled(cancel)
            self._mkdir(directory)
        config_path = ensure_in_dir(board_dir, board_dir / BOARD_CONFIG_FILE)
        check_canceled(cancel)
        if not path_exists(config_path):
            _atomic_write_yaml(config_path, BoardConfig().to_dict())
            logger.debug("Wrote default config for board {}", board.id)

    def _load_registry(self, cancel: Optional[CancelToken]) -> BoardRegistry:
        check_canceled(cancel)
        path = ensure_in_dir(self.storage_root, self.registry_path)
        try:
            data = _load_yaml(path)
        except FileNotFoundError as exc:
            raise StoreNotInitializedError(f"{path} does not exist", path=path) from exc
        check_canceled(cancel)
        return BoardRegistry.from_dict(data)

    def _save_registry(self, registry: BoardRegistry, cancel: Optional[CancelToken]) -> None:
        if not registry.boards:
            raise BoardDeleteForbiddenError("refusing to write a registry with no boards")
        if registry.active and registry.active not in registry.ids():
            raise BoardNotFoundError(f"active board {registry.active!r} is not registered")
        check_canceled(cancel)
        path = ensure_in_dir(self.storage_root, self.registry_path)
        check_canceled(cancel)
        _atomic_write_yaml(path, registry.to_dict())

    def _mkdir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError("create directory", directory, exc) from exc

    def _rename(self, src: Path, dest: Path) -> None:
        try:
            os.rename(src, dest)
        except OSError as exc:
            raise StorageError("move", src, exc) from exc
