"""
Container Chaos - Schedules chaos actions against containers

Kill containers with a signal or emulate network delay and packet loss,
once or repeatedly at a fixed interval until canceled.
"""
from .api import ChaosAPI, ChaosRuntime
from .interfaces import IActionDispatcher
from .models import (
    ChaosCommand,
    CommandType,
    KillCommand,
    NetemDelayCommand,
    NetemLossRandomCommand,
    NetemLossStateCommand,
    ScheduleResult,
    ScheduleSpec,
    TargetSelector
)
from .scheduler import ExecutionContext, InvalidSignalError, Scheduler
from .signals import LINUX_SIGNALS, validate_signal

__version__ = "0.1.0"

__all__ = [
    'ChaosAPI',
    'ChaosRuntime',
    'IActionDispatcher',
    'ChaosCommand',
    'CommandType',
    'KillCommand',
    'NetemDelayCommand',
    'NetemLossRandomCommand',
    'NetemLossStateCommand',
    'ScheduleResult',
    'ScheduleSpec',
    'TargetSelector',
    'ExecutionContext',
    'InvalidSignalError',
    'Scheduler',
    'LINUX_SIGNALS',
    'validate_signal'
]
