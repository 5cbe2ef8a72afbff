"""Functional constructors mirroring the two output modes.

``consolidate_func`` drives a callback, ``consolidate_queue`` feeds a bounded
queue. Both return a pair: something to report origin events with, and a
``stop`` function.

    notify, stop = consolidate_func(0.1, 0.5, refresh_ui)
    watcher.on_change = notify
    ...
    stop()

For a burst of events separated by short gaps, pick ``delay`` slightly
larger than the longest gap inside a burst and ``max_delay`` larger than
the longest burst. For streams of unpredictable intensity, tune both
against recorded traffic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from consolidate.config import ConsolidateConfig, TrailingPolicy
from consolidate.core import Consolidator

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from consolidate.adapters import Sink
    from consolidate.intake import Intake


def consolidate_func(
    delay: float,
    max_delay: float,
    action: Callable[[], Any | Awaitable[Any]],
    *,
    trailing: TrailingPolicy = TrailingPolicy.DISARM,
) -> tuple[Callable[[], None], Callable[[], None]]:
    """Start a consolidator that calls *action* once per consolidated event.

    Args:
        delay: Quiet period in seconds.
        max_delay: Ceiling in seconds, must be greater than *delay*.
        action: Zero-argument callable, sync or async.
        trailing: Trailing-timer policy when the ceiling fires.

    Returns:
        ``(notify, stop)``. Call ``notify()`` on every origin event, from any
        thread. ``stop()`` is idempotent.
    """
    config = ConsolidateConfig(delay=delay, max_delay=max_delay, trailing=trailing)
    consolidator = Consolidator(action, config=config)
    return consolidator.notify, consolidator.stop


def consolidate_queue(
    delay: float,
    max_delay: float,
    sink: Sink,
    *,
    trailing: TrailingPolicy = TrailingPolicy.DISARM,
) -> tuple[Intake, Callable[[], None]]:
    """Start a consolidator that puts a ``None`` marker into *sink* per consolidated event.

    *sink* must be bounded-queue-like (``asyncio.Queue``, ``queue.Queue``).
    Markers are dropped when it is full, so give it room or drain it faster
    than *delay*.

    Returns:
        ``(intake, stop)``. Report origin events with ``intake.notify()`` or
        with the try-put pattern::

            with contextlib.suppress(asyncio.QueueFull):
                intake.put_nowait(None)
    """
    config = ConsolidateConfig(delay=delay, max_delay=max_delay, trailing=trailing)
    consolidator = Consolidator.from_queue(sink, config=config)
    return consolidator.intake, consolidator.stop
