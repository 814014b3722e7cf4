"""
Core data models for the container chaos scheduler
"""
import math
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import TYPE_CHECKING, Any, ClassVar, List, Optional, Union

if TYPE_CHECKING:
    from .interfaces import IActionDispatcher
    from .scheduler.context import ExecutionContext

IPAddress = Union[IPv4Address, IPv6Address]


@dataclass
class TargetSelector:
    """Containers a chaos action applies to: explicit names and/or a pattern"""
    names: List[str] = field(default_factory=list)
    pattern: str = ""


class CommandType(Enum):
    """Types of chaos actions supported"""
    KILL = "kill"
    NETEM_DELAY = "netem_delay"
    NETEM_LOSS_RANDOM = "netem_loss_random"
    NETEM_LOSS_STATE = "netem_loss_state"


class TimerEvent(Enum):
    """Outcome of waiting on a schedule timer"""
    TICK = "tick"
    CANCELLED = "cancelled"


@dataclass
class ChaosCommand(ABC):
    """Parameters of one chaos action; each variant knows its dispatcher method"""
    command_type: ClassVar[CommandType]

    @abstractmethod
    def apply(self, dispatcher: "IActionDispatcher", ctx: "ExecutionContext",
              runtime_client: Any, selector: TargetSelector) -> Any:
        """Hand this command to the matching dispatcher method"""


@dataclass
class KillCommand(ChaosCommand):
    """Deliver a signal to the selected containers"""
    command_type: ClassVar[CommandType] = CommandType.KILL

    signal: str

    def apply(self, dispatcher, ctx, runtime_client, selector):
        return dispatcher.kill_containers(ctx, runtime_client, selector, self)


@dataclass
class NetemDelayCommand(ChaosCommand):
    """Delay egress traffic; time and jitter are milliseconds, duration seconds"""
    command_type: ClassVar[CommandType] = CommandType.NETEM_DELAY

    net_interface: str
    ips: List[IPAddress]
    duration: float
    time: int
    jitter: int
    correlation: float
    distribution: str
    image: str

    def apply(self, dispatcher, ctx, runtime_client, selector):
        return dispatcher.netem_delay_containers(ctx, runtime_client, selector, self)


@dataclass
class NetemLossRandomCommand(ChaosCommand):
    """Drop a random percentage of packets"""
    command_type: ClassVar[CommandType] = CommandType.NETEM_LOSS_RANDOM

    net_interface: str
    ips: List[IPAddress]
    duration: float
    image: str
    correlation: float
    percent: float

    def apply(self, dispatcher, ctx, runtime_client, selector):
        return dispatcher.netem_loss_random_containers(ctx, runtime_client, selector, self)


@dataclass
class NetemLossStateCommand(ChaosCommand):
    """
    Drop packets following a four-state Markov model.

    The transition probabilities are passed through to the dispatcher as given.
    """
    command_type: ClassVar[CommandType] = CommandType.NETEM_LOSS_STATE

    net_interface: str
    ips: List[IPAddress]
    duration: float
    image: str
    p13: float
    p31: float
    p32: float
    p23: float
    p14: float

    def apply(self, dispatcher, ctx, runtime_client, selector):
        return dispatcher.netem_loss_state_containers(ctx, runtime_client, selector, self)


@dataclass
class ScheduleSpec:
    """One chaos schedule: what to run, against which containers, how often"""
    interval: float  # Seconds between executions, 0 runs once
    selector: TargetSelector
    command: ChaosCommand
    schedule_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not math.isfinite(self.interval):
            raise ValueError(f"Schedule interval must be finite: {self.interval}")
        if self.interval < 0:
            raise ValueError(f"Schedule interval must not be negative: {self.interval}")

    @property
    def single_shot(self) -> bool:
        return self.interval == 0


class ScheduleState(Enum):
    """States of a schedule loop"""
    IDLE = "idle"
    EXECUTING = "executing"
    WAITING = "waiting"
    TERMINATED = "terminated"


class TerminationReason(Enum):
    """Why a schedule loop stopped"""
    COMPLETED = "completed"  # Single shot finished
    CANCELLED = "cancelled"  # Root context canceled


@dataclass
class ScheduleResult:
    """Outcome of a schedule once its loop has terminated"""
    schedule_id: str
    command_type: CommandType
    interval: float
    state: ScheduleState = ScheduleState.IDLE
    termination_reason: Optional[TerminationReason] = None
    executions: int = 0
    failures: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    last_error: Optional[str] = None

    @property
    def duration(self) -> float:
        end_time = self.end_time if self.end_time is not None else time.time()
        return end_time - self.start_time


@dataclass
class ChaosSettings:
    """Process-wide settings, loaded from a YAML or JSON config file"""
    log_level: str = "INFO"
    dispatcher: str = "dry-run"
    error_history_limit: int = 1000
    max_workers: Optional[int] = None  # Defaults to one worker per schedule
    runtime_client: Any = None  # Handed to the dispatcher on every call, e.g. a container engine endpoint
