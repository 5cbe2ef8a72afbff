"""Coalescing intake slot for origin events."""

import asyncio
import contextlib
import threading
from collections.abc import Callable
from typing import Any


class Intake:
    """Non-blocking slot holding at most one pending origin-event marker.

    Producers call :meth:`notify` (never raises) or :meth:`put_nowait`
    (raises :class:`asyncio.QueueFull` like a bounded queue would) from any
    thread or coroutine. Only the empty -> pending transition calls *wake*,
    so a burst of notifications costs the consolidation loop a single
    wake-up. The loop side calls :meth:`drain`.

    Args:
        wake: Thread-safe hook that wakes the consolidation loop.
    """

    __slots__ = ("_closed", "_lock", "_pending", "_wake")

    maxsize = 1

    def __init__(self, wake: Callable[[], None]) -> None:
        self._wake = wake
        self._pending = False
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        """Report one origin event, dropping it if a marker is already pending."""
        with contextlib.suppress(asyncio.QueueFull):
            self.put_nowait()

    def put_nowait(self, item: Any = None) -> None:
        """Deposit a marker; *item* is ignored since only presence matters.

        Raises:
            asyncio.QueueFull: A marker is already pending.
        """
        with self._lock:
            if self._closed:
                return
            if self._pending:
                raise asyncio.QueueFull
            self._pending = True
        self._wake()

    def drain(self) -> bool:
        """Take the pending marker, if any. Called by the consolidation loop."""
        with self._lock:
            if not self._pending:
                return False
            self._pending = False
            return True

    def close(self) -> None:
        """Ignore every later deposit."""
        with self._lock:
            self._closed = True
            self._pending = False

    def full(self) -> bool:
        return self._pending

    def empty(self) -> bool:
        return not self._pending

    def qsize(self) -> int:
        return int(self._pending)

    def __call__(self) -> None:
        self.notify()

    def __repr__(self) -> str:
        return f"Intake(pending={self._pending}, closed={self._closed})"
