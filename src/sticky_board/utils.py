"""Provide utility helpers for dates, slugs and identifiers."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional

from .constants import DATE_FORMAT


def _today() -> date:
    return date.today()


def _format_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return value.strftime(DATE_FORMAT)


def _parse_date(value: Any) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` header value.

    PyYAML already turns unquoted ISO dates into :class:`datetime.date`, so
    both shapes are accepted.  Empty values mean "unset"; anything else that
    does not parse raises :class:`ValueError`.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), DATE_FORMAT).date()


def slugify(value: str) -> str:
    """Lowercase ASCII letters and digits; every other run becomes one hyphen."""
    out: list[str] = []
    prev_dash = False
    for ch in value.lower():
        if ("a" <= ch <= "z") or ("0" <= ch <= "9"):
            out.append(ch)
            prev_dash = False
        elif not prev_dash:
            out.append("-")
            prev_dash = True
    return "".join(out).strip("-")


def _new_uid() -> str:
    return str(uuid.uuid4())
