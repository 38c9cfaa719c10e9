"""
Clock and timer abstractions for paced emission.

The aggregator never touches wall-clock time or timers directly: it reads a
``Clock`` (milliseconds) and arms timers through a ``Scheduler``. Production
code uses the asyncio loop when one is running and a threading timer
otherwise; tests plug in a manual clock and scheduler.
"""

import asyncio
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


class TimerHandle(ABC):
    """Handle to an armed timer."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the timer if it has not fired yet."""
        pass


class Scheduler(ABC):
    """Arms one-shot timers."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds.

        Args:
            delay_ms: Delay in milliseconds (negative values are treated as 0)
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the timer
        """
        pass


class _AsyncioTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTimerHandle(loop.call_later(max(delay_ms, 0.0) / 1000.0, callback))


class _ThreadTimerHandle(TimerHandle):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler(Scheduler):
    """Schedules callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(max(delay_ms, 0.0) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return _ThreadTimerHandle(timer)


class DefaultScheduler(Scheduler):
    """Uses the running asyncio loop if there is one, a threading timer otherwise."""

    def __init__(self):
        self._threading = ThreadingScheduler()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return self._threading.call_later(delay_ms, callback)
        return _AsyncioTimerHandle(loop.call_later(max(delay_ms, 0.0) / 1000.0, callback))
