"""
Shared fixtures for container chaos tests
"""
import pytest

from container_chaos.api import ChaosAPI, ChaosRuntime
from container_chaos.interfaces import IActionDispatcher, IScheduleTimer
from container_chaos.models import TimerEvent
from container_chaos.scheduler import Scheduler


class RecordingDispatcher(IActionDispatcher):
    """
    Dispatcher that records every call.

    cancel_after cancels the runtime's root context during the Nth call.
    fail_on lists call numbers (1-based) that raise, false_on those returning False.
    """

    def __init__(self, cancel_after=None, fail_on=(), false_on=()):
        self.calls = []
        self.runtime = None
        self.cancel_after = cancel_after
        self.fail_on = set(fail_on)
        self.false_on = set(false_on)

    def _call(self, method, ctx, runtime_client, selector, command):
        self.calls.append((method, ctx, runtime_client, selector, command))
        number = len(self.calls)
        if self.cancel_after is not None and number == self.cancel_after:
            self.runtime.cancel()
        if number in self.fail_on:
            raise RuntimeError(f"boom on call {number}")
        if number in self.false_on:
            return False
        return None

    def kill_containers(self, ctx, runtime_client, selector, command):
        return self._call('kill_containers', ctx, runtime_client, selector, command)

    def netem_delay_containers(self, ctx, runtime_client, selector, command):
        return self._call('netem_delay_containers', ctx, runtime_client, selector, command)

    def netem_loss_random_containers(self, ctx, runtime_client, selector, command):
        return self._call('netem_loss_random_containers', ctx, runtime_client, selector, command)

    def netem_loss_state_containers(self, ctx, runtime_client, selector, command):
        return self._call('netem_loss_state_containers', ctx, runtime_client, selector, command)

    def methods(self):
        return [call[0] for call in self.calls]


class FakeTimer(IScheduleTimer):
    """Timer that ticks instantly until the context is canceled"""

    def __init__(self, interval, max_waits=100):
        self.interval = interval
        self.max_waits = max_waits
        self.waits = 0
        self.stopped = False

    def wait(self, ctx):
        self.waits += 1
        if self.waits > self.max_waits:
            raise AssertionError("Schedule never observed cancellation")
        if ctx.cancelled:
            return TimerEvent.CANCELLED
        return TimerEvent.TICK

    def stop(self):
        self.stopped = True


class FakeTimerFactory:
    """Creates FakeTimers and remembers them"""

    def __init__(self):
        self.timers = []

    def __call__(self, interval):
        timer = FakeTimer(interval)
        self.timers.append(timer)
        return timer


def make_api(dispatcher, runtime_client="runtime-client"):
    runtime = ChaosRuntime(dispatcher=dispatcher, runtime_client=runtime_client)
    dispatcher.runtime = runtime
    timer_factory = FakeTimerFactory()
    api = ChaosAPI(runtime, scheduler=Scheduler(runtime, timer_factory=timer_factory))
    return api, runtime, timer_factory


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()
