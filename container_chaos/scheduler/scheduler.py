"""
Scheduler - Runs a chaos command once or at a fixed interval until canceled

The loop executes the command immediately, then waits for whichever comes
first: cancellation of the root context or the next timer tick. Zero-interval
schedules stop after their first execution. The call blocks for the whole
lifetime of the schedule; running several schedules at once is up to the
caller.
"""
import logging
import time
from typing import Callable, Optional

from ..interfaces import IScheduleTimer
from ..models import (
    ChaosCommand, ScheduleResult, ScheduleSpec, ScheduleState,
    TargetSelector, TerminationReason, TimerEvent
)
from .error_handler import ActionExecutionError
from .timer import create_timer

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float], IScheduleTimer]


class Scheduler:
    """Recurring and single-shot execution loop for chaos commands"""

    def __init__(self, runtime, timer_factory: Optional[TimerFactory] = None):
        self.runtime = runtime
        self.timer_factory = timer_factory or create_timer

    def run(self, command: ChaosCommand, selector: TargetSelector, interval: float) -> ScheduleResult:
        """Build a schedule for command and run it until it terminates"""
        return self.run_schedule(ScheduleSpec(interval=interval, selector=selector, command=command))

    def run_schedule(self, spec: ScheduleSpec) -> ScheduleResult:
        """Run a schedule loop; blocks until single-shot completion or cancellation"""
        result = ScheduleResult(
            schedule_id=spec.schedule_id,
            command_type=spec.command.command_type,
            interval=spec.interval
        )
        mode = "once" if spec.single_shot else f"every {spec.interval}s"
        logger.info(f"Starting {spec.command.command_type.value} schedule {spec.schedule_id} ({mode}) "
                    f"on names={spec.selector.names} pattern={spec.selector.pattern!r}")

        try:
            with self.runtime.root_context.child(name=spec.schedule_id) as ctx, \
                    self.timer_factory(spec.interval) as timer:
                while True:
                    result.state = ScheduleState.EXECUTING
                    self._execute(ctx, spec, result)

                    result.state = ScheduleState.WAITING
                    if timer.wait(ctx) is TimerEvent.CANCELLED:
                        result.termination_reason = TerminationReason.CANCELLED
                        break
                    if spec.single_shot:
                        result.termination_reason = TerminationReason.COMPLETED
                        break
                    logger.debug("Next chaos execution (tick) ...")
        finally:
            result.state = ScheduleState.TERMINATED
            result.end_time = time.time()

        logger.info(f"Schedule {spec.schedule_id} {result.termination_reason.value} after "
                    f"{result.executions} execution(s), {result.failures} failure(s)")
        return result

    def _execute(self, ctx, spec: ScheduleSpec, result: ScheduleResult) -> None:
        """Run the command once, recording but never raising its failure"""
        result.executions += 1
        attempt = result.executions
        command_type = spec.command.command_type.value

        try:
            outcome = spec.command.apply(self.runtime.dispatcher, ctx, self.runtime.runtime_client, spec.selector)
        except Exception as e:
            error = ActionExecutionError(
                f"{command_type} execution {attempt} failed: {e}",
                command_type=command_type,
                schedule_id=spec.schedule_id,
                attempt=attempt,
                cause=e
            )
        else:
            if outcome is not False:
                return
            error = ActionExecutionError(
                f"{command_type} execution {attempt} reported failure",
                command_type=command_type,
                schedule_id=spec.schedule_id,
                attempt=attempt
            )

        result.failures += 1
        result.last_error = str(error)
        self.runtime.error_handler.handle_action_error(error)

