from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidPathError, StorageError


def ensure_in_dir(base_dir: Path, path: Path) -> Path:
    """Return *path* made absolute, or raise :class:`InvalidPathError`.

    *path* must lie strictly below *base_dir*.  Both paths are resolved
    (symlinks included) before comparing, so ``..`` segments or crafted
    identifiers cannot step outside.
    """
    base = Path(os.path.abspath(base_dir))
    target = Path(os.path.abspath(path))
    try:
        base_real = base.resolve()
        target_real = target.resolve()
    except OSError as exc:
        raise StorageError("resolve path", target, exc) from exc
    if base_real not in target_real.parents:
        raise InvalidPathError(f"{target} is outside {base}", path=target)
    return target


def path_exists(path: Path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageError("stat", path, exc) from exc
    return True


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StorageError("write", path, exc) from exc


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise StorageError("read", path, exc) from exc


def _dump_yaml(data: dict[str, Any]) -> str:
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def _atomic_write_yaml(path: Path, data: dict[str, Any]) -> None:
    _atomic_write_bytes(path, _dump_yaml(data).encode("utf-8"))


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping, wrapping read and parse failures in :class:`StorageError`.

    A missing file propagates :class:`FileNotFoundError` untouched so callers
    can map it to their own "not initialized" condition.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exc:
        raise StorageError("read", path, exc) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise StorageError("parse", path, exc) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError("parse", path, ValueError(f"expected mapping, got {type(data).__name__}"))
    return data


def _load_data_with_error(
    path: Path,
    default: dict[str, Any],
) -> tuple[dict[str, Any], str | None]:
    """
    Load YAML and return (data, error_message).

    Unlike _load_yaml(), this never raises, so optional settings files can be
    reported without aborting the caller.
    """
    if not path.exists():
        return default, None
    try:
        return _load_yaml(path), None
    except StorageError as exc:
        return default, f"{path.name}: {exc.cause.__class__.__name__}: {exc.cause}"
