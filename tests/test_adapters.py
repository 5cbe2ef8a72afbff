"""Tests for the output adapters."""

import asyncio
import queue
import threading

import pytest

from consolidate.adapters import CallbackAdapter, OutputAdapter, QueueAdapter


class TestOutputAdapter:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            OutputAdapter()  # type: ignore[abstract]


class TestCallbackAdapter:
    async def test_sync_action(self):
        calls = []
        adapter = CallbackAdapter(lambda: calls.append(1))
        await adapter.deliver()
        assert calls == [1]

    async def test_async_action_is_awaited(self):
        calls = []

        async def action():
            await asyncio.sleep(0.01)
            calls.append(1)

        adapter = CallbackAdapter(action)
        await adapter.deliver()
        assert calls == [1]

    async def test_exception_propagates(self):
        def action():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await CallbackAdapter(action).deliver()

    def test_not_callable_raises(self):
        with pytest.raises(TypeError, match="action must be callable"):
            CallbackAdapter("nope")  # type: ignore[arg-type]

    def test_repr(self):
        def refresh():
            pass

        assert "refresh" in repr(CallbackAdapter(refresh))


class TestQueueAdapter:
    async def test_puts_marker(self):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        adapter = QueueAdapter(sink)
        await adapter.deliver()
        assert sink.get_nowait() is None

    async def test_full_asyncio_queue_drops(self):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        adapter = QueueAdapter(sink)
        await adapter.deliver()
        await adapter.deliver()
        assert sink.qsize() == 1
        assert adapter.dropped == 1

    async def test_full_thread_queue_drops(self):
        sink: queue.Queue = queue.Queue(maxsize=1)
        adapter = QueueAdapter(sink)
        await adapter.deliver()
        await adapter.deliver()
        await adapter.deliver()
        assert sink.qsize() == 1
        assert adapter.dropped == 2

    async def test_drop_is_logged(self, caplog):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        sink.put_nowait(None)
        with caplog.at_level("DEBUG", logger="consolidate.adapters"):
            await QueueAdapter(sink).deliver()
        assert "consolidated event dropped" in caplog.text

    def test_asyncio_queue_without_running_loop_raises(self):
        with pytest.raises(TypeError, match="use queue.Queue from synchronous code"):
            QueueAdapter(asyncio.Queue(maxsize=1))

    async def test_delivery_from_another_thread_wakes_consumer(self):
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        adapter = QueueAdapter(sink)
        loop = asyncio.get_running_loop()

        # Deliver from a thread running its own loop, the way a background-hosted consolidator does
        timer = threading.Timer(0.05, lambda: asyncio.run(adapter.deliver()))
        timer.start()
        begin = loop.time()
        await asyncio.wait_for(sink.get(), timeout=2.0)
        timer.join()

        assert loop.time() - begin < 0.5

    def test_sink_without_put_nowait_raises(self):
        with pytest.raises(TypeError, match="sink must provide put_nowait"):
            QueueAdapter([])  # type: ignore[arg-type]

    def test_repr(self):
        assert repr(QueueAdapter(queue.Queue())) == "QueueAdapter(dropped=0)"
