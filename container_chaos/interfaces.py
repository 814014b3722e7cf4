"""
Base interfaces for the collaborators the scheduler consumes
"""
from abc import ABC, abstractmethod
from typing import Any

from .models import (
    TargetSelector, TimerEvent, KillCommand, NetemDelayCommand,
    NetemLossRandomCommand, NetemLossStateCommand
)


class IActionDispatcher(ABC):
    """
    Interface for executing chaos actions against a container runtime.

    Each method receives the schedule's execution context, the runtime client
    handle, the target selector and the command. A method reports failure by
    raising or by returning False. Methods are called once per tick, so they
    must tolerate repeated invocation with the same arguments, and should check
    ``ctx.cancelled`` where they can stop early.
    """

    @abstractmethod
    def kill_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                        command: KillCommand) -> Any:
        """Send command.signal to the selected containers"""
        pass

    @abstractmethod
    def netem_delay_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                               command: NetemDelayCommand) -> Any:
        """Add netem delay on the selected containers"""
        pass

    @abstractmethod
    def netem_loss_random_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                                     command: NetemLossRandomCommand) -> Any:
        """Add random netem packet loss on the selected containers"""
        pass

    @abstractmethod
    def netem_loss_state_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                                    command: NetemLossStateCommand) -> Any:
        """Add four-state Markov netem packet loss on the selected containers"""
        pass


class IScheduleTimer(ABC):
    """Interface for the interval timer owned by a single schedule loop"""

    @abstractmethod
    def wait(self, ctx) -> TimerEvent:
        """Block until the next tick or until ctx is canceled, whichever comes first"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Release the timer"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()
        return False
