"""Output adapters that deliver consolidated events."""

import asyncio
import contextlib
import inspect
import logging
import queue
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Anything with a non-blocking ``put_nowait``: ``asyncio.Queue``, ``queue.Queue``..."""

    def put_nowait(self, item: Any, /) -> None: ...


class OutputAdapter(ABC):
    """Base class for the action invoked once per consolidated event.

    The consolidation loop awaits :meth:`deliver` and never runs two
    deliveries of the same consolidator concurrently.
    """

    __slots__ = ()

    @abstractmethod
    async def deliver(self) -> None:
        """Deliver one consolidated event."""


class CallbackAdapter(OutputAdapter):
    """Call a zero-argument function on the consolidation loop.

    Plain functions run inline on the loop's thread. If the call returns an
    awaitable (a coroutine function, for instance) it is awaited before the
    loop moves on. The action must not block for long and must not wait on
    the consolidator it is attached to.
    """

    __slots__ = ("action",)

    def __init__(self, action: Callable[[], Any | Awaitable[Any]]) -> None:
        if not callable(action):
            raise TypeError(f"action must be callable, got {type(action).__name__}")
        self.action = action

    async def deliver(self) -> None:
        result = self.action()
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        name = getattr(self.action, "__qualname__", repr(self.action))
        return f"CallbackAdapter({name})"


class QueueAdapter(OutputAdapter):
    """Put a ``None`` marker into a caller-owned bounded queue without blocking.

    When the queue is full the marker is dropped. Size the queue, or drain it
    faster than ``delay``, to avoid losing consolidated events.

    An ``asyncio.Queue`` belongs to the event loop that consumes it, so the
    adapter must be built on that loop. Puts coming from any other thread are
    handed to that loop with ``call_soon_threadsafe`` so its waiters wake up.
    Thread-safe queues (``queue.Queue``) are used directly from any thread.

    Raises:
        TypeError: *sink* has no ``put_nowait``, or is an ``asyncio.Queue``
            and no event loop is running.
    """

    __slots__ = ("_loop", "dropped", "sink")

    def __init__(self, sink: Sink) -> None:
        if not callable(getattr(sink, "put_nowait", None)):
            raise TypeError(f"sink must provide put_nowait(), got {type(sink).__name__}")
        self._loop: asyncio.AbstractEventLoop | None = None
        if isinstance(sink, asyncio.Queue):
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                raise TypeError(
                    "an asyncio.Queue sink must be created from the event loop that consumes it; "
                    "use queue.Queue from synchronous code"
                ) from None
        self.sink = sink
        self.dropped = 0

    async def deliver(self) -> None:
        if self._loop is None or self._loop is asyncio.get_running_loop():
            self._put()
        else:
            # The consumer loop may already be closed.
            with contextlib.suppress(RuntimeError):
                self._loop.call_soon_threadsafe(self._put)

    def _put(self) -> None:
        try:
            self.sink.put_nowait(None)
        except (asyncio.QueueFull, queue.Full):
            self.dropped += 1
            logger.debug("Sink %r is full, consolidated event dropped", self.sink)

    def __repr__(self) -> str:
        return f"QueueAdapter(dropped={self.dropped})"
