"""Decorator API for consolidating calls to a zero-argument function."""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable
from functools import update_wrapper
from typing import Any, overload

from consolidate.config import ConsolidateConfig, TrailingPolicy
from consolidate.core import Consolidator

Action = Callable[[], Any | Awaitable[Any]]


class ConsolidatedFunction:
    """Callable returned by :func:`consolidated`.

    Calling it reports an origin event; the wrapped function runs at the
    consolidated rate. The :class:`Consolidator` is created on the first
    call so that it binds to the caller's event loop when there is one.
    If that loop goes away (an ``asyncio.run`` session ending, say), the
    next call builds a fresh consolidator on the then-current loop.
    """

    def __init__(self, func: Action, config: ConsolidateConfig) -> None:
        self._func = func
        self._config = config
        self._consolidator: Consolidator | None = None
        self._lock = threading.Lock()
        self._stopped = False
        update_wrapper(self, func)

    @property
    def config(self) -> ConsolidateConfig:
        return self._config

    @property
    def consolidator(self) -> Consolidator | None:
        """The current consolidator, or None before the first call."""
        return self._consolidator

    def __call__(self) -> None:
        consolidator = self._consolidator
        if consolidator is None or not consolidator.running:
            consolidator = self._ensure_consolidator()
            if consolidator is None:
                return
        consolidator.notify()

    def _ensure_consolidator(self) -> Consolidator | None:
        with self._lock:
            if self._stopped:
                return None
            if self._consolidator is None or not self._consolidator.running:
                self._consolidator = Consolidator(self._func, config=self._config)
            return self._consolidator

    def stop(self) -> None:
        """Stop consolidating; later calls are ignored."""
        with self._lock:
            self._stopped = True
            consolidator = self._consolidator
        if consolidator is not None:
            consolidator.stop()

    async def aclose(self) -> None:
        """Stop and wait for the consolidation loop to exit."""
        self.stop()
        if self._consolidator is not None:
            await self._consolidator.aclose()

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"<consolidated {name} delay={self._config.delay} max_delay={self._config.max_delay}>"


@overload
def consolidated(
    func: Action,
    /,
) -> ConsolidatedFunction: ...


@overload
def consolidated(
    *,
    delay: float = 0.1,
    max_delay: float = 0.5,
    trailing: TrailingPolicy = TrailingPolicy.DISARM,
) -> Callable[[Action], ConsolidatedFunction]: ...


def consolidated(
    func: Action | None = None,
    /,
    *,
    delay: float = 0.1,
    max_delay: float = 0.5,
    trailing: TrailingPolicy = TrailingPolicy.DISARM,
) -> ConsolidatedFunction | Callable[[Action], ConsolidatedFunction]:
    """Decorator that consolidates calls to a zero-argument function.

    The decorated function's call semantics change: each call only reports
    an origin event and returns ``None`` immediately. The original function
    runs once per consolidated event, on the consolidation loop. Both plain
    and ``async`` functions are supported.

    Args:
        func: The function to decorate (when used without parentheses).
        delay: Quiet period in seconds.
        max_delay: Ceiling in seconds, must be greater than *delay*.
        trailing: Trailing-timer policy when the ceiling fires.

    Examples:
    ```python
        @consolidated(delay=0.2, max_delay=1.0)
        def redraw() -> None:
            canvas.refresh()

        for change in changes:
            redraw()  # the canvas refreshes a handful of times, not per change

        redraw.stop()
    ```
    """
    config = ConsolidateConfig(delay=delay, max_delay=max_delay, trailing=trailing)

    def decorator(fn: Action) -> ConsolidatedFunction:
        if not callable(fn):
            raise TypeError("@consolidated only supports callables.")
        return ConsolidatedFunction(fn, config)

    if func is not None:
        return decorator(func)

    return decorator
