"""Cooperative cancellation for long-running store operations.

Store operations accept an optional ``cancel`` token and poll it before each
filesystem call and between iterations of directory scans.  Setting the
token from another thread aborts the operation with
:class:`~sticky_board.errors.OperationCanceled`; files already written stay
written (there are no multi-file transactions).
"""

from __future__ import annotations

import threading
from typing import Optional

from .errors import OperationCanceled


class CancelToken:
    """Thread-safe cancellation flag backed by :class:`threading.Event`."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        self._event.set()

    @property
    def canceled(self) -> bool:
        return self._event.is_set()

    def raise_if_canceled(self) -> None:
        if self._event.is_set():
            raise OperationCanceled(self.reason or "operation canceled")


def check_canceled(token: Optional[CancelToken]) -> None:
    """Raise :class:`OperationCanceled` when *token* has been set."""
    if token is not None:
        token.raise_if_canceled()
