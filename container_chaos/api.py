"""
Public chaos operations: kill, netem delay, netem random loss, netem loss rate

Every operation builds its command, then blocks in the scheduler until the
schedule terminates. Only parameter validation errors reach the caller.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .interfaces import IActionDispatcher
from .models import (
    IPAddress, KillCommand, NetemDelayCommand, NetemLossRandomCommand,
    NetemLossStateCommand, ScheduleResult, TargetSelector
)
from .scheduler import ErrorHandler, ExecutionContext, Scheduler
from .signals import validate_signal

logger = logging.getLogger(__name__)


def _selector(names: Union[str, Sequence[str]], pattern: str) -> TargetSelector:
    # A bare string names one container
    if isinstance(names, str):
        names = [names]
    return TargetSelector(list(names), pattern)


class ChaosRuntime:
    """
    Collaborators shared by every schedule in the process.

    Built once before any operation runs. The dispatcher, runtime client and
    root context are only read by schedules, never replaced.
    """

    def __init__(self, dispatcher: IActionDispatcher, runtime_client: Any = None,
                 root_context: Optional[ExecutionContext] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.dispatcher = dispatcher
        self.runtime_client = runtime_client
        self.root_context = root_context or ExecutionContext()
        self.error_handler = error_handler or ErrorHandler()

    def cancel(self) -> None:
        """Cancel the root context, stopping every active schedule at its next wait"""
        logger.info("Cancelling all chaos schedules")
        self.root_context.cancel()

    @property
    def cancelled(self) -> bool:
        return self.root_context.cancelled


class ChaosAPI:
    """Public chaos operations bound to one runtime"""

    def __init__(self, runtime: ChaosRuntime, scheduler: Optional[Scheduler] = None):
        self.runtime = runtime
        self.scheduler = scheduler or Scheduler(runtime)
        self.operations: Dict[str, Callable[..., ScheduleResult]] = {
            'kill': self.kill,
            'netem_delay': self.netem_delay,
            'netem_loss_random': self.netem_loss_random,
            'netem_loss_rate': self.netem_loss_rate,
        }

    def kill(self, signal: str, interval: float, names: Sequence[str], pattern: str) -> ScheduleResult:
        """Kill containers matched by names or pattern with the given signal"""
        validate_signal(signal)
        command = KillCommand(signal=signal)
        return self.scheduler.run(command, _selector(names, pattern), interval)

    def netem_delay(self, interval: float, duration: float, names: Sequence[str], pattern: str,
                    net_interface: str, ips: List[IPAddress], image: str, time: int, jitter: int,
                    correlation: float, distribution: str) -> ScheduleResult:
        """Add delay to egress traffic of containers matched by names or pattern"""
        command = NetemDelayCommand(
            net_interface=net_interface,
            ips=ips,
            duration=duration,
            time=time,
            jitter=jitter,
            correlation=correlation,
            distribution=distribution,
            image=image
        )
        return self.scheduler.run(command, _selector(names, pattern), interval)

    def netem_loss_random(self, interval: float, duration: float, names: Sequence[str], pattern: str,
                          net_interface: str, ips: List[IPAddress], image: str,
                          correlation: float, percent: float) -> ScheduleResult:
        """Drop a random share of packets on containers matched by names or pattern"""
        command = NetemLossRandomCommand(
            net_interface=net_interface,
            ips=ips,
            duration=duration,
            image=image,
            correlation=correlation,
            percent=percent
        )
        return self.scheduler.run(command, _selector(names, pattern), interval)

    def netem_loss_rate(self, interval: float, duration: float, names: Sequence[str], pattern: str,
                        net_interface: str, ips: List[IPAddress], image: str,
                        p13: float, p31: float, p32: float, p23: float, p14: float) -> ScheduleResult:
        """Drop packets using the four-state Markov loss model"""
        command = NetemLossStateCommand(
            net_interface=net_interface,
            ips=ips,
            duration=duration,
            image=image,
            p13=p13,
            p31=p31,
            p32=p32,
            p23=p23,
            p14=p14
        )
        return self.scheduler.run(command, _selector(names, pattern), interval)

    def run_entry(self, entry) -> ScheduleResult:
        """Run a schedule entry loaded from a schedule file"""
        operation = self.operations[entry.action]
        return operation(**entry.arguments)
