"""
Timer sources for cooldown and recording deadlines.

Both schedulers run callbacks on the caller's thread of control, so frame
processing and timer callbacks never run concurrently.
"""
import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: Event loop to schedule on. If None, the running loop is
                looked up on first use.
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_s), callback)


class ManualTimer:
    """Handle returned by :class:`ManualScheduler`."""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Simulated clock. Time only moves when :meth:`advance` or
    :meth:`advance_to` is called, which makes timer-driven behaviour
    deterministic in tests and in offline replays of recorded landmarks.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + max(0.0, delay_s), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward by ``seconds`` and fire due timers."""
        return self.advance_to(self._now + seconds)

    def advance_to(self, t: float) -> int:
        """
        Move the clock to ``t`` and fire every timer due at or before it,
        in due order. Timers scheduled by a firing callback run too if they
        fall inside the window.

        Returns:
            Number of callbacks fired
        """
        fired = 0
        while self._queue and self._queue[0][0] <= t:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = max(self._now, due)
            timer.callback()
            fired += 1
        self._now = max(self._now, t)
        return fired
