"""
Scheduler - Drives chaos commands once or repeatedly until canceled

Components:
- ExecutionContext: Cancellable context tree rooted at one process-wide context
- OneShotTimer / Ticker: Tick sources for zero and positive intervals
- Scheduler: The recurring-action loop
- ErrorHandler: Records non-fatal action failures
"""
from .context import ExecutionContext
from .error_handler import (
    ActionExecutionError,
    ChaosError,
    DispatcherLoadError,
    ErrorCategory,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    InvalidSignalError,
    ScheduleConfigError
)
from .scheduler import Scheduler
from .timer import OneShotTimer, Ticker, create_timer

__all__ = [
    'ExecutionContext',
    'Scheduler',
    'OneShotTimer',
    'Ticker',
    'create_timer',
    'ErrorHandler',
    'ErrorContext',
    'ErrorCategory',
    'ErrorSeverity',
    'ChaosError',
    'InvalidSignalError',
    'ActionExecutionError',
    'ScheduleConfigError',
    'DispatcherLoadError'
]
