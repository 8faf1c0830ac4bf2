"""Split and render Markdown files carrying a YAML frontmatter header.

Layout::

    ---
    <yaml header>
    ---
    <free-form body>

The codec is shared by every record type; :class:`TaskParser` binds it to
:class:`~sticky_board.task_engine.model.Task`.
"""

from __future__ import annotations

from typing import Any, Union

import yaml

from .constants import FRONTMATTER_DELIMITER
from .errors import InvalidFrontmatterError, InvalidHeaderError
from .io_utils import _dump_yaml
from .task_engine.model import Task


def split_frontmatter(data: Union[bytes, str]) -> tuple[str, str]:
    """Return ``(header_text, body)``.

    Raises:
        InvalidFrontmatterError: Opening delimiter missing or header never closed.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidFrontmatterError(f"file is not valid UTF-8: {exc}") from exc
    else:
        text = data
    lines = text.splitlines()
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        raise InvalidFrontmatterError("missing frontmatter")

    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONTMATTER_DELIMITER:
            return "\n".join(lines[1:idx]), "\n".join(lines[idx + 1:])
    raise InvalidFrontmatterError("missing frontmatter end")


def decode_header(header_text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(header_text)
    except (yaml.YAMLError, ValueError) as exc:
        # PyYAML raises a bare ValueError for impossible timestamps such as 2024-13-45.
        raise InvalidHeaderError(f"failed to decode header: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidHeaderError(f"header must be a mapping, got {type(data).__name__}")
    return data


def join_frontmatter(header: dict[str, Any], body: str) -> bytes:
    """Render a header mapping and body; a non-empty body always ends with a newline."""
    header_text = _dump_yaml(header)
    parts = [FRONTMATTER_DELIMITER, "\n", header_text]
    if not header_text.endswith("\n"):
        parts.append("\n")
    parts.extend([FRONTMATTER_DELIMITER, "\n"])
    if body:
        parts.append(body)
        if not body.endswith("\n"):
            parts.append("\n")
    return "".join(parts).encode("utf-8")


class TaskParser:
    """Read and write task files."""

    def parse(self, data: Union[bytes, str]) -> Task:
        header_text, body = split_frontmatter(data)
        return Task.from_header(decode_header(header_text), content=body)

    def render(self, task: Task) -> bytes:
        return join_frontmatter(task.to_header(), task.content)
