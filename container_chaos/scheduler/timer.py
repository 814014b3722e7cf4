"""
Schedule timers - one-shot and fixed-rate tick sources for schedule loops
"""
import logging
import math
import time

from ..interfaces import IScheduleTimer
from ..models import TimerEvent

logger = logging.getLogger(__name__)


class OneShotTimer(IScheduleTimer):
    """Timer for zero-interval schedules: fires once, immediately"""

    def __init__(self):
        self.stopped = False

    def wait(self, ctx) -> TimerEvent:
        if self.stopped:
            raise RuntimeError("Timer already stopped")
        if ctx.cancelled:
            return TimerEvent.CANCELLED
        return TimerEvent.TICK

    def stop(self) -> None:
        self.stopped = True


class Ticker(IScheduleTimer):
    """
    Fixed-rate ticker on the monotonic clock.

    Ticks are due at start + n * interval. If the schedule was busy past a
    deadline, the overdue tick fires right away and any further missed ticks
    are dropped.
    """

    def __init__(self, interval: float, clock=time.monotonic):
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"Ticker interval must be a positive finite number: {interval}")
        self.interval = interval
        self.clock = clock
        self.stopped = False
        self.next_deadline = clock() + interval

    def wait(self, ctx) -> TimerEvent:
        if self.stopped:
            raise RuntimeError("Timer already stopped")
        if ctx.cancelled:
            return TimerEvent.CANCELLED

        remaining = self.next_deadline - self.clock()
        if remaining > 0 and ctx.wait(remaining):
            return TimerEvent.CANCELLED
        if ctx.cancelled:
            return TimerEvent.CANCELLED

        self._advance()
        return TimerEvent.TICK

    def _advance(self) -> None:
        now = self.clock()
        self.next_deadline += self.interval
        if self.next_deadline <= now:
            missed = int((now - self.next_deadline) // self.interval) + 1
            self.next_deadline += missed * self.interval
            logger.debug(f"Dropped {missed} missed tick(s)")

    def stop(self) -> None:
        self.stopped = True


def create_timer(interval: float) -> IScheduleTimer:
    """Pick the timer primitive for a schedule interval"""
    if interval == 0:
        return OneShotTimer()
    return Ticker(interval)
