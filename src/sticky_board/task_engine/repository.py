"""File-backed task repository for a single board.

Each task is one Markdown file under ``<board>/tasks/``; archived tasks live
under ``<board>/archive/tasks/`` with the same filename.  Sequential IDs come
from ``next_id`` in ``<board>/config.yaml``.

All public methods take the instance's reader/writer lock (writers
exclusive, readers shared) and an optional ``cancel`` token that is polled
before every filesystem call and between directory-scan iterations.  The
lock only covers this instance; separate processes sharing one storage
directory are not coordinated.
"""

from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from loguru import logger

from ..cancel import CancelToken, check_canceled
from ..constants import (
    ARCHIVE_DIR,
    BOARD_CONFIG_FILE,
    BOARD_DESCRIPTION_FILE,
    DEFAULT_BOARD_ID,
    TASK_FILE_SUFFIX,
    TASKS_DIR,
)
from ..errors import (
    FrontmatterError,
    InvalidDependencyError,
    InvalidIDError,
    InvalidPathError,
    StorageError,
    StoreNotInitializedError,
    TaskFileError,
    TaskNotFoundError,
)
from ..frontmatter import TaskParser
from ..io_utils import _atomic_write_bytes, _atomic_write_yaml, _load_yaml, _read_bytes, ensure_in_dir, path_exists
from ..locks import ReadWriteLock
from ..utils import _new_uid, _today
from .config import BoardConfig, BoardContext
from .dependencies import is_ready, validate_no_cycles
from .model import (
    Task,
    format_sequential_id,
    normalize_ids,
    normalize_priority,
    normalize_tags,
    validate_id,
    validate_title,
)


class TaskRepository:
    """Create, read, update, archive and delete the task files of one board.

    Parameters
    ----------
    board_dir:
        The board's root directory (``<storage root>/boards/<id>``).
    board_id, board_name:
        Stamped onto every task read from disk; never persisted in task files.
    today:
        Clock used to default ``Task.created``.
    """

    def __init__(
        self,
        board_dir: Path,
        board_id: str = DEFAULT_BOARD_ID,
        board_name: str = "",
        *,
        today: Callable[[], date] = _today,
    ) -> None:
        self.board_dir = Path(os.path.abspath(board_dir))
        self.board_id = board_id
        self.board_name = board_name.strip() or board_id
        self.tasks_dir = self.board_dir / TASKS_DIR
        self.archive_tasks_dir = self.board_dir / ARCHIVE_DIR / TASKS_DIR
        self.config_path = self.board_dir / BOARD_CONFIG_FILE
        self._lock = ReadWriteLock()
        self._parser = TaskParser()
        self._today = today

    # ------------------------------------------------------------------
    # Listing / lookup
    # ------------------------------------------------------------------

    def list_all(self, *, cancel: Optional[CancelToken] = None) -> list[Task]:
        """Return every active task, failing fast on the first malformed file."""
        with self._lock.read():
            check_canceled(cancel)
            self._ensure_dir_exists(self.tasks_dir)
            return self._read_tasks(self.tasks_dir, cancel)

    def list_archived(self, *, cancel: Optional[CancelToken] = None) -> list[Task]:
        with self._lock.read():
            check_canceled(cancel)
            self._ensure_dir_exists(self.archive_tasks_dir)
            return self._read_tasks(self.archive_tasks_dir, cancel)

    def get(self, task_id: str, *, cancel: Optional[CancelToken] = None) -> Task:
        with self._lock.read():
            check_canceled(cancel)
            validate_id(task_id)
            self._ensure_dir_exists(self.tasks_dir)
            _, task = self._find_task(self.tasks_dir, task_id, cancel)
            return task

    def list_ready(self, *, cancel: Optional[CancelToken] = None) -> list[Task]:
        """Return active tasks whose dependencies all exist and are done/archived."""
        tasks = self.list_all(cancel=cancel)
        index: dict[str, Task] = {}
        for task in tasks:
            check_canceled(cancel)
            index[task.id] = task
        ready: list[Task] = []
        for task in tasks:
            check_canceled(cancel)
            ok, _ = is_ready(task, index)
            if ok:
                ready.append(task)
        return ready

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, task: Task, *, cancel: Optional[CancelToken] = None) -> Task:
        """Persist a new task and return it with ``file_path`` populated.

        An empty ``task.id`` is replaced by the next sequential ID; the
        counter in the board config is bumped and saved before the task file
        is written, so IDs are never reused even if this write fails.
        """
        with self._lock.write():
            check_canceled(cancel)
            task = replace(task)
            task.title = validate_title(task.title)
            task.priority = normalize_priority(task.priority)
            task.tags = normalize_tags(task.tags)
            task.depends_on = normalize_ids(task.depends_on)
            if task.id:
                validate_id(task.id)

            check_canceled(cancel)
            try:
                self.tasks_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError("create tasks directory", self.tasks_dir, exc) from exc

            if not task.id:
                task.id = self._allocate_id(cancel)
            if not task.uid:
                task.uid = _new_uid()
            if task.created is None:
                task.created = self._today()

            path = self._task_path(self.tasks_dir, task.id)
            check_canceled(cancel)
            if path_exists(path):
                raise InvalidIDError(f"task {task.id} already exists", path=path)
            self._write_task(path, task, cancel)
            self._attach(task, path)
            logger.info("Created task {} on board {}: {}", task.id, self.board_id, task.title)
            return task

    # ------------------------------------------------------------------
    # Field updates
    # ------------------------------------------------------------------

    def update_status(self, task_id: str, status: str, *, cancel: Optional[CancelToken] = None) -> Task:
        def _apply(task: Task) -> None:
            task.status = status

        return self._update(task_id, _apply, cancel)

    def update_title(self, task_id: str, title: str, *, cancel: Optional[CancelToken] = None) -> Task:
        trimmed = validate_title(title)

        def _apply(task: Task) -> None:
            task.title = trimmed

        return self._update(task_id, _apply, cancel)

    def update_tags(self, task_id: str, tags: Iterable[str], *, cancel: Optional[CancelToken] = None) -> Task:
        normalized = normalize_tags(tags)

        def _apply(task: Task) -> None:
            task.tags = normalized

        return self._update(task_id, _apply, cancel)

    def update_priority(self, task_id: str, priority: int, *, cancel: Optional[CancelToken] = None) -> Task:
        normalized = normalize_priority(priority)

        def _apply(task: Task) -> None:
            task.priority = normalized

        return self._update(task_id, _apply, cancel)

    def update_content(self, task_id: str, content: str, *, cancel: Optional[CancelToken] = None) -> Task:
        def _apply(task: Task) -> None:
            task.content = content

        return self._update(task_id, _apply, cancel)

    def update_dependencies(
        self,
        task_id: str,
        depends_on: Iterable[str],
        *,
        cancel: Optional[CancelToken] = None,
    ) -> Task:
        """Replace the dependency list after checking the whole board for cycles.

        Nothing is written when a dependency ID is malformed or the new edges
        would close a cycle.
        """
        deps = list(depends_on)
        with self._lock.write():
            check_canceled(cancel)
            validate_id(task_id)
            for dep in deps:
                try:
                    validate_id(dep)
                except InvalidIDError as exc:
                    raise InvalidDependencyError(f"dependency {dep!r} is invalid") from exc
            self._ensure_dir_exists(self.tasks_dir)

            tasks = self._read_tasks(self.tasks_dir, cancel)
            target: Optional[Task] = None
            for task in tasks:
                check_canceled(cancel)
                if task.id == task_id:
                    task.depends_on = normalize_ids(deps)
                    target = task
            if target is None:
                raise TaskNotFoundError(f"task {task_id} not found")
            validate_no_cycles(tasks)

            assert target.file_path is not None
            self._write_task(target.file_path, target, cancel)
            logger.info("Updated dependencies of {}: {}", task_id, target.depends_on)
            return target

    # ------------------------------------------------------------------
    # Archive / restore / delete
    # ------------------------------------------------------------------

    def archive(self, task_id: str, *, cancel: Optional[CancelToken] = None) -> Task:
        """Move a task file into ``archive/tasks/`` unchanged."""
        with self._lock.write():
            check_canceled(cancel)
            validate_id(task_id)
            self._ensure_dir_exists(self.tasks_dir)
            self._mkdir(self.archive_tasks_dir, cancel)
            path, task = self._find_task(self.tasks_dir, task_id, cancel)
            dest = self._move(path, self.archive_tasks_dir, cancel)
            self._attach(task, dest)
            logger.info("Archived task {} on board {}", task_id, self.board_id)
            return task

    def restore(self, task_id: str, *, cancel: Optional[CancelToken] = None) -> Task:
        """Move an archived task file back into ``tasks/`` unchanged."""
        with self._lock.write():
            check_canceled(cancel)
            validate_id(task_id)
            self._ensure_dir_exists(self.archive_tasks_dir)
            self._mkdir(self.tasks_dir, cancel)
            path, task = self._find_task(self.archive_tasks_dir, task_id, cancel)
            dest = self._move(path, self.tasks_dir, cancel)
            self._attach(task, dest)
            logger.info("Restored task {} on board {}", task_id, self.board_id)
            return task

    def archive_before(self, cutoff: date, *, cancel: Optional[CancelToken] = None) -> list[Task]:
        """Archive every active task created before *cutoff*.

        Tasks without a ``created`` date are left alone.  On cancellation the
        tasks already moved stay archived.
        """
        if isinstance(cutoff, datetime):
            cutoff = cutoff.date()
        with self._lock.write():
            check_canceled(cancel)
            self._ensure_dir_exists(self.tasks_dir)
            self._mkdir(self.archive_tasks_dir, cancel)
            moved: list[Task] = []
            for task in self._read_tasks(self.tasks_dir, cancel):
                check_canceled(cancel)
                if task.created is None or not task.created < cutoff:
                    continue
                assert task.file_path is not None
                dest = self._move(task.file_path, self.archive_tasks_dir, cancel)
                self._attach(task, dest)
                moved.append(task)
            if moved:
                logger.info("Archived {} task(s) created before {} on board {}", len(moved), cutoff, self.board_id)
            return moved

    def delete(self, task_id: str, *, cancel: Optional[CancelToken] = None) -> None:
        with self._lock.write():
            self._delete_from(self.tasks_dir, task_id, cancel)
        logger.info("Deleted task {} on board {}", task_id, self.board_id)

    def delete_archived(self, task_id: str, *, cancel: Optional[CancelToken] = None) -> None:
        with self._lock.write():
            self._delete_from(self.archive_tasks_dir, task_id, cancel)
        logger.info("Deleted archived task {} on board {}", task_id, self.board_id)

    # ------------------------------------------------------------------
    # Board config and description
    # ------------------------------------------------------------------

    def load_config(self, *, cancel: Optional[CancelToken] = None) -> BoardConfig:
        with self._lock.read():
            return self._load_config(cancel)

    def save_config(self, config: BoardConfig, *, cancel: Optional[CancelToken] = None) -> None:
        with self._lock.write():
            self._save_config(config.normalized(), cancel)

    def update_board_context(self, context: BoardContext, *, cancel: Optional[CancelToken] = None) -> BoardConfig:
        with self._lock.write():
            config = self._load_config(cancel)
            config.context = context.normalized()
            self._save_config(config, cancel)
            return config

    def load_description(self, *, cancel: Optional[CancelToken] = None) -> str:
        """Return the board's ``board.md`` text, or ``""`` when there is none."""
        with self._lock.read():
            check_canceled(cancel)
            path = ensure_in_dir(self.board_dir, self.board_dir / BOARD_DESCRIPTION_FILE)
            check_canceled(cancel)
            if not path_exists(path):
                return ""
            return _read_bytes(path).decode("utf-8")

    def update_description(self, description: str, *, cancel: Optional[CancelToken] = None) -> None:
        """Write ``board.md``; blank text removes the file."""
        with self._lock.write():
            check_canceled(cancel)
            path = ensure_in_dir(self.board_dir, self.board_dir / BOARD_DESCRIPTION_FILE)
            if not description.strip():
                try:
                    path.unlink(missing_ok=True)
                except OSError as exc:
                    raise StorageError("remove board description", path, exc) from exc
                return
            check_canceled(cancel)
            _atomic_write_bytes(path, description.encode("utf-8"))

    # ------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _update(self, task_id: str, apply: Callable[[Task], None], cancel: Optional[CancelToken]) -> Task:
        with self._lock.write():
            check_canceled(cancel)
            validate_id(task_id)
            self._ensure_dir_exists(self.tasks_dir)
            path, task = self._find_task(self.tasks_dir, task_id, cancel)
            apply(task)
            self._write_task(path, task, cancel)
            logger.debug("Rewrote task file {}", path)
            return task

    def _allocate_id(self, cancel: Optional[CancelToken]) -> str:
        """Take the next sequential ID, skipping any whose file already exists.

        Imports with explicit ``T-`` IDs or a migrated config whose counter
        lags behind the files can leave ``next_id`` pointing at a taken ID.
        """
        config = self._load_config(cancel)
        while True:
            check_canceled(cancel)
            task_id = format_sequential_id(config.next_id)
            config.next_id += 1
            taken = path_exists(self._task_path(self.tasks_dir, task_id)) or path_exists(
                self._task_path(self.archive_tasks_dir, task_id)
            )
            if not taken:
                break
            logger.debug("Skipping taken task id {}", task_id)
        self._save_config(config, cancel)
        return task_id

    def _delete_from(self, directory: Path, task_id: str, cancel: Optional[CancelToken]) -> None:
        check_canceled(cancel)
        validate_id(task_id)
        self._ensure_dir_exists(directory)
        path, _ = self._find_task(directory, task_id, cancel)
        check_canceled(cancel)
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError(f"delete task {task_id}", path, exc) from exc

    def _ensure_dir_exists(self, directory: Path) -> None:
        try:
            is_dir = directory.is_dir()
            exists = is_dir or directory.exists()
        except OSError as exc:
            raise StorageError("stat", directory, exc) from exc
        if not exists:
            raise StoreNotInitializedError(f"{directory} does not exist", path=directory)
        if not is_dir:
            raise InvalidPathError(f"{directory} is not a directory", path=directory)

    def _mkdir(self, directory: Path, cancel: Optional[CancelToken]) -> None:
        check_canceled(cancel)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError("create directory", directory, exc) from exc

    def _task_path(self, directory: Path, task_id: str) -> Path:
        validate_id(task_id)
        return ensure_in_dir(directory, directory / f"{task_id}{TASK_FILE_SUFFIX}")

    def _iter_task_files(self, directory: Path, cancel: Optional[CancelToken]) -> Iterator[Path]:
        check_canceled(cancel)
        try:
            names = sorted(os.listdir(directory))
        except OSError as exc:
            raise StorageError("read tasks directory", directory, exc) from exc
        for name in names:
            check_canceled(cancel)
            if not name.endswith(TASK_FILE_SUFFIX):
                continue
            path = ensure_in_dir(directory, directory / name)
            if path.is_dir():
                continue
            yield path

    def _read_task(self, path: Path, cancel: Optional[CancelToken]) -> Task:
        check_canceled(cancel)
        data = _read_bytes(path)
        try:
            task = self._parser.parse(data)
        except FrontmatterError as exc:
            raise TaskFileError(f"failed to parse task file {path}: {exc}", path=path) from exc
        self._attach(task, path)
        return task

    def _read_tasks(self, directory: Path, cancel: Optional[CancelToken]) -> list[Task]:
        return [self._read_task(path, cancel) for path in self._iter_task_files(directory, cancel)]

    def _find_task(self, directory: Path, task_id: str, cancel: Optional[CancelToken]) -> tuple[Path, Task]:
        """Locate a task by its header ID.

        ``<id>.md`` is tried first; otherwise every file is scanned, since the
        header, not the filename, is authoritative.
        """
        candidate = self._task_path(directory, task_id)
        if path_exists(candidate):
            task = self._read_task(candidate, cancel)
            if task.id == task_id:
                return candidate, task
        for path in self._iter_task_files(directory, cancel):
            if path == candidate:
                continue
            task = self._read_task(path, cancel)
            if task.id == task_id:
                return path, task
        raise TaskNotFoundError(f"task {task_id} not found")

    def _write_task(self, path: Path, task: Task, cancel: Optional[CancelToken]) -> None:
        check_canceled(cancel)
        content = self._parser.render(task)
        check_canceled(cancel)
        _atomic_write_bytes(path, content)

    def _move(self, src: Path, dest_dir: Path, cancel: Optional[CancelToken]) -> Path:
        src = ensure_in_dir(src.parent, src)
        dest = ensure_in_dir(dest_dir, dest_dir / src.name)
        check_canceled(cancel)
        if path_exists(dest):
            raise InvalidPathError(f"{dest} already exists", path=dest)
        try:
            os.rename(src, dest)
        except OSError as exc:
            raise StorageError("move task file", src, exc) from exc
        return dest

    def _attach(self, task: Task, path: Path) -> None:
        task.file_path = path
        task.board_id = self.board_id
        task.board_name = self.board_name

    def _load_config(self, cancel: Optional[CancelToken]) -> BoardConfig:
        check_canceled(cancel)
        path = ensure_in_dir(self.board_dir, self.config_path)
        check_canceled(cancel)
        try:
            data = _load_yaml(path)
        except FileNotFoundError as exc:
            raise StoreNotInitializedError(f"{path} does not exist", path=path) from exc
        return BoardConfig.from_dict(data).normalized()

    def _save_config(self, config: BoardConfig, cancel: Optional[CancelToken]) -> None:
        check_canceled(cancel)
        path = ensure_in_dir(self.board_dir, self.config_path)
        check_canceled(cancel)
        _atomic_write_yaml(path, config.to_dict())
