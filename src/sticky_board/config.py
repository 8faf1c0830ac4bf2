"""Load optional store settings from `<storage root>/sticky.yaml`."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .constants import (
    BOARDS_DIR,
    REGISTRY_FILE,
    SETTINGS_FILE,
    STORE_DIR_NAME,
    STORE_ROOT_ENV_VAR,
)
from .io_utils import _load_data_with_error, ensure_in_dir


@dataclass
class StoreSettings:
    """Settings read from the storage root.

    ``boards_registry`` relocates the board registry file; relative values are
    taken from the storage root and must stay inside it.
    """

    boards_registry: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoreSettings":
        raw = data.get("boards_registry")
        registry = str(raw).strip() if raw is not None else ""
        return cls(boards_registry=registry or None)

    def registry_path(self, storage_root: Path) -> Path:
        default = storage_root / BOARDS_DIR / REGISTRY_FILE
        if not self.boards_registry:
            return default
        candidate = Path(self.boards_registry)
        if not candidate.is_absolute():
            candidate = storage_root / candidate
        return ensure_in_dir(storage_root, candidate)


def load_store_settings(storage_root: Path) -> tuple[StoreSettings, str | None]:
    """Load the optional settings file.

    Args:
        storage_root: Resolved storage root directory.

    Returns:
        A tuple of `(settings, error_message)`. If the file is missing, returns
        default settings and `None`.
    """
    path = storage_root / SETTINGS_FILE
    data, err = _load_data_with_error(path, {})
    if err:
        return StoreSettings(), err
    return StoreSettings.from_dict(data), None


def resolve_storage_root(working_dir: Path, override: Optional[str] = None) -> Path:
    """Pick the storage root: explicit override, then environment, then `.sticky`."""
    value = (override or "").strip() or os.environ.get(STORE_ROOT_ENV_VAR, "").strip()
    if not value:
        return (working_dir / STORE_DIR_NAME).resolve()
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = working_dir / path
    return path.resolve()
