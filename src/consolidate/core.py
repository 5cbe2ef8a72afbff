"""Core Consolidator class: the consolidation loop and its lifecycle."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any

from consolidate._sync import get_shared_loop
from consolidate.adapters import CallbackAdapter, OutputAdapter, QueueAdapter
from consolidate.config import ConsolidateConfig, FireMode, TrailingPolicy
from consolidate.intake import Intake
from consolidate.timers import TimerPair

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from concurrent.futures import Future

    from consolidate.adapters import Sink

logger = logging.getLogger(__name__)


class Consolidator:
    """Turns frequent origin events into sparse consolidated events.

    Each instance runs one consolidation loop for its whole lifetime. The
    loop is an ``asyncio.Task`` on the running event loop when there is one,
    otherwise it is hosted on a shared background loop thread.

    How it works:
        - Every origin event (re)starts the trailing timer (``delay``).
        - The first origin event of a burst also starts the ceiling timer
          (``max_delay``), which is never reset by later events.
        - Whichever timer fires first invokes the action once and ends the
          burst.

    Example::

        delay=0.1s, max_delay=0.5s

        t=0.00s event     -> trailing 0.1s, ceiling 0.5s
        t=0.05s event     -> trailing reset, ceiling still running
        t=0.15s trailing  -> action(), burst over

        events every 0.05s from t=0 -> action() at t=0.5, t=1.0, ...

    :meth:`notify` and :meth:`stop` are safe to call from any thread or
    coroutine. The action always runs on the loop, one call at a time.

    Args:
        action: Zero-argument callable (sync or async) or an
            :class:`OutputAdapter` invoked once per consolidated event.
        config: Timing configuration. Defaults to :class:`ConsolidateConfig()`.
    """

    __slots__ = (
        "_adapter",
        "_cancel",
        "_config",
        "_done",
        "_emitted",
        "_future",
        "_intake",
        "_last_mode",
        "_loop",
        "_ready",
        "_timers",
    )

    def __init__(
        self,
        action: Callable[[], Any | Awaitable[Any]] | OutputAdapter,
        *,
        config: ConsolidateConfig | None = None,
    ) -> None:
        self._config = config or ConsolidateConfig()
        self._adapter = action if isinstance(action, OutputAdapter) else CallbackAdapter(action)
        self._cancel = threading.Event()
        self._done = threading.Event()
        self._ready = asyncio.Event()
        self._timers = TimerPair(self._config.delay, self._config.max_delay, self._ready.set)
        self._intake = Intake(self._wake)
        self._emitted = 0
        self._last_mode: FireMode | None = None

        self._future: asyncio.Task[None] | Future[None]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            host = get_shared_loop()
            self._loop = host.loop
            self._future = host.submit(self._run())
        else:
            self._loop = loop
            self._future = loop.create_task(self._run())
        self._future.add_done_callback(self._finish)

    @classmethod
    def from_queue(cls, sink: Sink, *, config: ConsolidateConfig | None = None) -> Consolidator:
        """Build a consolidator that puts a ``None`` marker into *sink* per consolidated event."""
        return cls(QueueAdapter(sink), config=config)

    @property
    def config(self) -> ConsolidateConfig:
        return self._config

    @property
    def delay(self) -> float:
        return self._config.delay

    @property
    def max_delay(self) -> float:
        return self._config.max_delay

    @property
    def adapter(self) -> OutputAdapter:
        return self._adapter

    @property
    def intake(self) -> Intake:
        """Queue-like handle accepting origin events via ``put_nowait``."""
        return self._intake

    @property
    def stopped(self) -> bool:
        """True once :meth:`stop` has been called or the loop has exited."""
        return self._cancel.is_set()

    @property
    def running(self) -> bool:
        """True until the consolidation loop has exited or its host loop has closed."""
        return not self._done.is_set() and not self._loop.is_closed()

    @property
    def emitted(self) -> int:
        """Number of consolidated events delivered so far."""
        return self._emitted

    @property
    def last_mode(self) -> FireMode | None:
        """Which timer produced the most recent consolidated event."""
        return self._last_mode

    def notify(self) -> None:
        """Report an origin event. Never blocks, never raises."""
        self._intake.notify()

    def stop(self) -> None:
        """Terminate the consolidation loop (idempotent, thread-safe)."""
        if self._cancel.is_set():
            return
        self._cancel.set()
        self._intake.close()
        self._wake()

    async def aclose(self) -> None:
        """Stop and wait for the consolidation loop to exit."""
        self.stop()
        if self._on_host_loop():
            waiter = self._future if isinstance(self._future, asyncio.Task) else asyncio.wrap_future(self._future)
            with contextlib.suppress(asyncio.CancelledError):
                await waiter
        else:
            await asyncio.to_thread(self._done.wait)

    def join(self, timeout: float | None = None) -> bool:
        """Block until the consolidation loop has exited.

        Returns False if *timeout* elapsed first.

        Raises:
            RuntimeError: Called from the event loop hosting this consolidator.
        """
        if self._on_host_loop():
            raise RuntimeError("join() would block the event loop running this consolidator; use 'await aclose()'")
        return self._done.wait(timeout)

    def _on_host_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _wake(self) -> None:
        # The host loop may already be closed during interpreter shutdown.
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._ready.set)

    async def _run(self) -> None:
        logger.debug("%r started", self)
        try:
            while not self._cancel.is_set():
                await self._ready.wait()
                self._ready.clear()
                await self._dispatch()
        finally:
            self._finish()
            logger.debug("%r stopped after %d consolidated events", self, self._emitted)

    def _finish(self, _: object = None) -> None:
        # Also runs as a done callback: a host loop shutting down may cancel
        # the task before its body ever started.
        self._cancel.set()
        self._timers.stop()
        self._intake.close()
        self._done.set()

    async def _dispatch(self) -> None:
        """Handle every ready source: timer fires first, then the intake."""
        timers = self._timers
        while not self._cancel.is_set():
            if timers.trailing.consume():
                timers.ceiling.stop()
                await self._emit(FireMode.QUIET)
            elif timers.ceiling.consume():
                if self._config.trailing is TrailingPolicy.DISARM:
                    timers.trailing.stop()
                await self._emit(FireMode.CEILING)
            elif self._intake.drain():
                timers.trailing.reset()
                # No-op while a burst is active: the ceiling is armed once per burst.
                timers.ceiling.start()
            else:
                return

    async def _emit(self, mode: FireMode) -> None:
        if self._cancel.is_set():
            return
        self._emitted += 1
        self._last_mode = mode
        logger.debug("Consolidated event #%d (%s)", self._emitted, mode)
        try:
            await self._adapter.deliver()
        except Exception:
            logger.exception("Consolidated action %r failed", self._adapter)

    def __enter__(self) -> Consolidator:
        return self

    def __exit__(self, *_: Any) -> None:
        self.stop()
        if not self._on_host_loop():
            self.join()

    async def __aenter__(self) -> Consolidator:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"Consolidator(delay={self._config.delay}, "
            f"max_delay={self._config.max_delay}, "
            f"trailing={self._config.trailing.value}, "
            f"stopped={self.stopped})"
        )
