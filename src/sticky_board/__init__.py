"""Provide the public `sticky_board` package exports."""

from __future__ import annotations

from .cancel import CancelToken
from .config import StoreSettings, load_store_settings, resolve_storage_root
from .task_engine.model import Task, new_task
from .task_engine.registry import BoardRegistryManager
from .task_engine.repository import TaskRepository

__all__ = [
    "BoardRegistryManager",
    "CancelToken",
    "StoreSettings",
    "Task",
    "TaskRepository",
    "load_store_settings",
    "new_task",
    "resolve_storage_root",
]
