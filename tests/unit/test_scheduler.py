"""Unit tests for the clock and scheduler implementations."""

import asyncio
import threading

import pytest

from llm_ui_stream.streaming.scheduler import (
    AsyncioScheduler,
    DefaultScheduler,
    ThreadingScheduler,
    monotonic_ms,
)
from tests.helpers.fake_timers import ManualClock, ManualScheduler


def test_monotonic_ms_is_milliseconds():
    first = monotonic_ms()
    second = monotonic_ms()

    assert second >= first


class TestAsyncioScheduler:
    """Timers on the running event loop."""

    @pytest.mark.asyncio
    async def test_call_later_fires(self):
        fired = asyncio.Event()
        AsyncioScheduler().call_later(5, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel(self):
        calls = []
        handle = AsyncioScheduler().call_later(5, lambda: calls.append(1))
        handle.cancel()

        await asyncio.sleep(0.03)
        assert calls == []

    @pytest.mark.asyncio
    async def test_default_scheduler_uses_running_loop(self):
        fired_on = []
        DefaultScheduler().call_later(0, lambda: fired_on.append(threading.current_thread()))

        await asyncio.sleep(0.02)
        assert fired_on == [threading.current_thread()]


class TestThreadingScheduler:
    """Timers on daemon threads."""

    def test_call_later_fires(self):
        fired = threading.Event()
        ThreadingScheduler().call_later(5, fired.set)

        assert fired.wait(timeout=1.0)

    def test_cancel(self):
        fired = threading.Event()
        handle = ThreadingScheduler().call_later(50, fired.set)
        handle.cancel()

        assert not fired.wait(timeout=0.1)

    def test_default_scheduler_without_loop(self):
        fired = threading.Event()
        DefaultScheduler().call_later(1, fired.set)

        assert fired.wait(timeout=1.0)


class TestManualScheduler:
    """Deterministic test scheduler."""

    def test_fires_in_due_order(self):
        clock = ManualClock(start=0)
        scheduler = ManualScheduler(clock)
        seen = []
        scheduler.call_later(20, lambda: seen.append(("b", clock())))
        scheduler.call_later(10, lambda: seen.append(("a", clock())))

        scheduler.advance(25)

        assert seen == [("a", 10), ("b", 20)]
        assert clock() == 25
