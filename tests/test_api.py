"""Tests for the consolidate_func and consolidate_queue constructors."""

import asyncio
import contextlib
import queue

import pytest

from consolidate.api import consolidate_func, consolidate_queue
from consolidate.config import TrailingPolicy
from consolidate.intake import Intake


class TestConsolidateFunc:
    async def test_returns_notify_and_stop(self, recorder):
        notify, stop = consolidate_func(0.05, 0.25, recorder)
        try:
            assert callable(notify)
            assert callable(stop)
            notify()
            notify()
            await asyncio.sleep(0.15)
            assert recorder.count == 1
        finally:
            stop()

    async def test_stop_twice(self, recorder):
        notify, stop = consolidate_func(0.05, 0.25, recorder)
        stop()
        stop()
        notify()
        await asyncio.sleep(0.1)
        assert recorder.count == 0

    def test_invalid_delays_raise(self, recorder):
        with pytest.raises(ValueError, match="max_delay.*must be > delay"):
            consolidate_func(0.5, 0.1, recorder)

    def test_from_sync_code(self, recorder):
        notify, stop = consolidate_func(0.05, 0.25, recorder)
        try:
            notify()
            assert recorder.called.wait(1.0)
        finally:
            stop()

    async def test_trailing_policy_is_passed(self, recorder, schedule):
        notify, stop = consolidate_func(0.1, 0.3, recorder, trailing=TrailingPolicy.KEEP)
        try:
            schedule(notify, [i * 0.04 for i in range(7)])
            await asyncio.sleep(0.6)
            assert recorder.count == 2
        finally:
            stop()


class TestConsolidateQueue:
    async def test_returns_intake_and_stop(self):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        intake, stop = consolidate_queue(0.05, 0.25, sink)
        try:
            assert isinstance(intake, Intake)
            intake.notify()
            marker = await asyncio.wait_for(sink.get(), timeout=1.0)
            assert marker is None
        finally:
            stop()

    async def test_try_put_pattern(self):
        sink: asyncio.Queue = asyncio.Queue(maxsize=4)
        intake, stop = consolidate_queue(0.05, 0.25, sink)
        try:
            for _ in range(50):
                with contextlib.suppress(asyncio.QueueFull):
                    intake.put_nowait(None)
            await asyncio.sleep(0.15)
            assert sink.qsize() == 1
        finally:
            stop()

    async def test_full_sink_drops_events(self, schedule):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        intake, stop = consolidate_queue(0.05, 0.25, sink)
        try:
            schedule(intake.notify, [0.0, 0.15, 0.3])
            await asyncio.sleep(0.45)
            # Three consolidated events, room for one
            assert sink.qsize() == 1
        finally:
            stop()

    def test_asyncio_sink_from_sync_code_raises(self):
        with pytest.raises(TypeError, match="asyncio.Queue sink"):
            consolidate_queue(0.05, 0.25, asyncio.Queue(maxsize=1))

    def test_thread_queue_sink(self):
        sink: queue.Queue = queue.Queue(maxsize=1)
        intake, stop = consolidate_queue(0.05, 0.25, sink)
        try:
            intake.notify()
            assert sink.get(timeout=1.0) is None
        finally:
            stop()
