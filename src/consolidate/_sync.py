"""Background event loop for consolidators created outside a running loop.

Synchronous callers (threads, GUI code, scripts) get their consolidation
loops hosted on one shared daemon thread. The thread is shut down at
interpreter exit, cancelling every consolidator still hosted on it.
"""

import asyncio
import atexit
import logging
import threading
from concurrent.futures import Future
from typing import Any

logger = logging.getLogger(__name__)


class _EventLoopThread:
    """Owns a daemon thread running an event loop that hosts consolidation loops."""

    __slots__ = ("_lock", "_loop", "_started", "_thread")

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The background loop, starting the thread if needed."""
        self.start()
        assert self._loop is not None
        return self._loop

    def start(self) -> None:
        """Start the background event loop thread (idempotent)."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name="consolidate-loop", daemon=True)
            self._thread.start()
            self._started.wait()
        logger.debug("Started background consolidation loop thread")

    def _run(self) -> None:
        loop = self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._started.set()
        try:
            loop.run_forever()
        finally:
            # Let hosted consolidation loops run their cleanup before closing.
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    def submit(self, coro: Any) -> Future[Any]:
        """Schedule a coroutine on the background loop without waiting for it."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def shutdown(self) -> None:
        """Stop the background loop, cancel what it hosts and join the thread."""
        with self._lock:
            if self._loop is not None and not self._loop.is_closed():
                self._loop.call_soon_threadsafe(self._loop.stop)
            if self._thread is not None:
                self._thread.join(timeout=5.0)
                self._thread = None
                self._loop = None
                self._started.clear()
                logger.debug("Stopped background consolidation loop thread")


# Module-level shared event loop thread for consolidators created without a running loop
_shared_loop = _EventLoopThread()
atexit.register(_shared_loop.shutdown)


def get_shared_loop() -> _EventLoopThread:
    """Return the shared background event loop thread, starting it if needed."""
    _shared_loop.start()
    return _shared_loop
