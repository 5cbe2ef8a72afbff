"""Consolidate — turn frequent events into sparse, bounded-latency ones.

A consolidator sits between a noisy event source (file watchers, token
streams, sensor callbacks) and an expensive reaction (UI refresh, outbound
notification). Two timers decide when the reaction runs:

- ``delay``: fire once the stream has been quiet this long.
- ``max_delay``: fire at the latest this long after a burst began, even if
  events never stop.

Basic usage:

    from consolidate import consolidate_func

    notify, stop = consolidate_func(0.1, 0.5, refresh_ui)
    for change in changes:
        notify()
    stop()

Queue usage:

    sink = asyncio.Queue(maxsize=1)
    intake, stop = consolidate_queue(0.1, 0.5, sink)
    intake.notify()
    await sink.get()

Decorator usage:

    from consolidate import consolidated

    @consolidated(delay=0.1, max_delay=0.5)
    def refresh_ui() -> None:
        ...
"""

from consolidate.adapters import CallbackAdapter, OutputAdapter, QueueAdapter
from consolidate.api import consolidate_func, consolidate_queue
from consolidate.config import ConsolidateConfig, FireMode, TrailingPolicy
from consolidate.core import Consolidator
from consolidate.decorator import ConsolidatedFunction, consolidated
from consolidate.intake import Intake

__all__ = [
    "CallbackAdapter",
    "ConsolidateConfig",
    "ConsolidatedFunction",
    "Consolidator",
    "FireMode",
    "Intake",
    "OutputAdapter",
    "QueueAdapter",
    "TrailingPolicy",
    "consolidate_func",
    "consolidate_queue",
    "consolidated",
]

__version__ = "0.1.0"
