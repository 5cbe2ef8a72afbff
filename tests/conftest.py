"""Shared fixtures for consolidate tests."""

import asyncio
import threading
import time

import pytest

from consolidate.config import ConsolidateConfig


class Recorder:
    """Zero-argument action recording when it was called, relative to :meth:`reset`."""

    def __init__(self) -> None:
        self.times: list[float] = []
        self.called = threading.Event()
        self.threads: set[str] = set()
        self._start = time.monotonic()

    def reset(self) -> None:
        self.times.clear()
        self.called.clear()
        self._start = time.monotonic()

    @property
    def count(self) -> int:
        return len(self.times)

    def __call__(self) -> None:
        self.times.append(time.monotonic() - self._start)
        self.threads.add(threading.current_thread().name)
        self.called.set()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def config():
    return ConsolidateConfig(delay=0.1, max_delay=0.5)


@pytest.fixture
def schedule():
    """Call *fn* at each offset (seconds) from now on the running loop."""

    def _schedule(fn, offsets):
        loop = asyncio.get_running_loop()
        return [loop.call_later(offset, fn) for offset in offsets]

    return _schedule
