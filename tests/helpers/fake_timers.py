"""Deterministic clock and scheduler for pacing tests."""

from typing import Callable, List, Optional

from llm_ui_stream.streaming.scheduler import Scheduler, TimerHandle


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class ManualTimer(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], None], seq: int):
        self.due = due
        self.callback = callback
        self.seq = seq
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose timers fire only from :meth:`advance`.

    Timers fire in due-time order, and the shared clock is moved to each
    timer's due time before its callback runs, so callbacks observe the
    time they were scheduled for.
    """

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.timers: List[ManualTimer] = []
        self._seq = 0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        self._seq += 1
        timer = ManualTimer(self.clock() + max(delay_ms, 0.0), callback, self._seq)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def _next_due(self, until: float) -> Optional[ManualTimer]:
        due = [t for t in self.pending if t.due <= until]
        if not due:
            return None
        return min(due, key=lambda t: (t.due, t.seq))

    def advance(self, ms: float) -> None:
        """Move time forward by ``ms``, firing every timer that becomes due."""
        target = self.clock() + ms
        while True:
            timer = self._next_due(target)
            if timer is None:
                break
            self.clock.now = max(self.clock.now, timer.due)
            timer.fired = True
            timer.callback()
        self.clock.now = target

    def run_all(self, limit: int = 10000) -> None:
        """Fire timers until none are pending."""
        for _ in range(limit):
            pending = self.pending
            if not pending:
                return
            timer = min(pending, key=lambda t: (t.due, t.seq))
            self.advance(max(timer.due - self.clock(), 0.0))
        raise RuntimeError("Timers kept re-arming")
