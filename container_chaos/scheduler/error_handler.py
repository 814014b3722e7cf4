"""
Error Handler - Exception types and centralized handling of chaos action failures

Validation errors are raised to the caller. Failures of individual chaos
action executions are recorded here, logged, and never propagated.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


class ChaosError(Exception):
    """Base class for all container chaos errors"""


class InvalidSignalError(ChaosError, ValueError):
    """Raised when a kill action names a signal outside the Linux signal table"""

    def __init__(self, signal: Any):
        self.signal = signal
        super().__init__(f"Unexpected signal: {signal}")


class ActionExecutionError(ChaosError):
    """A single chaos action execution failed"""

    def __init__(self, message: str, command_type: Optional[str] = None,
                 schedule_id: Optional[str] = None, attempt: int = 0,
                 cause: Optional[BaseException] = None):
        self.command_type = command_type
        self.schedule_id = schedule_id
        self.attempt = attempt
        self.cause = cause
        super().__init__(message)


class ScheduleConfigError(ChaosError, ValueError):
    """Raised when a schedule file or schedule entry is malformed"""


class DispatcherLoadError(ChaosError):
    """Raised when an action dispatcher cannot be resolved"""


class ErrorSeverity(Enum):
    """Severity levels for errors"""
    LOW = "low"  # Non-critical, can continue
    MEDIUM = "medium"  # Action failed, schedule continues
    HIGH = "high"  # Operation aborted
    FATAL = "fatal"  # Unrecoverable, must abort


class ErrorCategory(Enum):
    """Categories of errors for targeted handling"""
    SIGNAL_VALIDATION = "signal_validation"
    ACTION_EXECUTION = "action_execution"
    SCHEDULE_CONFIGURATION = "schedule_configuration"
    DISPATCHER = "dispatcher"


@dataclass
class ErrorContext:
    """Context information for an error"""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception: Optional[BaseException] = None
    component: Optional[str] = None
    schedule_id: Optional[str] = None
    command_type: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


ErrorCallback = Callable[[ErrorContext], None]


class ErrorHandler:
    """
    Centralized error handling for chaos schedules.

    Provides:
    - Severity based logging
    - A bounded error history shared by all schedules
    - Callbacks so embedding programs can observe action failures
    """

    def __init__(self, history_limit: int = 1000):
        self.history_limit = history_limit
        self.error_history: Deque[ErrorContext] = deque(maxlen=history_limit)
        self.callbacks: List[ErrorCallback] = []
        self._lock = threading.Lock()

    def register_callback(self, callback: ErrorCallback) -> None:
        """Register a callback invoked for every handled error"""
        self.callbacks.append(callback)

    def handle_error(self, error_context: ErrorContext) -> bool:
        """Record an error and return True if the caller may continue"""
        self._log_error(error_context)

        with self._lock:
            self.error_history.append(error_context)

        for callback in list(self.callbacks):
            try:
                callback(error_context)
            except Exception as e:
                logger.error(f"Error callback {callback!r} failed: {e}")

        if error_context.severity in (ErrorSeverity.HIGH, ErrorSeverity.FATAL):
            return False
        return True

    def handle_action_error(self, error: ActionExecutionError) -> bool:
        """Record a failed chaos action execution; always non-fatal"""
        return self.handle_error(ErrorContext(
            category=ErrorCategory.ACTION_EXECUTION,
            severity=ErrorSeverity.MEDIUM,
            message=str(error),
            exception=error.cause,
            component="scheduler",
            schedule_id=error.schedule_id,
            command_type=error.command_type,
            metadata={'attempt': error.attempt}
        ))

    def _log_error(self, error_context: ErrorContext):
        """Log error with appropriate level based on severity"""
        log_message = f"[{error_context.category.value}] {error_context.message}"

        if error_context.component:
            log_message = f"[{error_context.component}] {log_message}"

        if error_context.schedule_id:
            log_message += f" (schedule: {error_context.schedule_id})"

        if error_context.severity == ErrorSeverity.FATAL:
            logger.critical(log_message)
        elif error_context.severity in (ErrorSeverity.HIGH, ErrorSeverity.MEDIUM):
            logger.error(log_message)
        else:
            logger.warning(log_message)

        if error_context.exception and error_context.severity in [ErrorSeverity.HIGH, ErrorSeverity.FATAL]:
            logger.error("Caused by", exc_info=error_context.exception)

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors encountered"""
        with self._lock:
            history = list(self.error_history)

        errors_by_category: Dict[str, int] = {}
        errors_by_severity: Dict[str, int] = {}

        for error in history:
            category = error.category.value
            errors_by_category[category] = errors_by_category.get(category, 0) + 1

            severity = error.severity.value
            errors_by_severity[severity] = errors_by_severity.get(severity, 0) + 1

        return {
            'total_errors': len(history),
            'by_category': errors_by_category,
            'by_severity': errors_by_severity,
            'recent_errors': [
                {
                    'category': e.category.value,
                    'severity': e.severity.value,
                    'message': e.message
                }
                for e in history[-10:]  # Last 10 errors
            ]
        }

    def clear_history(self):
        """Clear error history"""
        with self._lock:
            self.error_history.clear()
        logger.info("Error history cleared")
