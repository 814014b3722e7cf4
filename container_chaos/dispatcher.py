"""
Action dispatchers shipped with the package and dispatcher plugin loading
"""
import importlib
import logging
import threading
from dataclasses import asdict
from typing import Any, List, Tuple

from .interfaces import IActionDispatcher
from .models import (
    ChaosCommand, KillCommand, NetemDelayCommand, NetemLossRandomCommand,
    NetemLossStateCommand, TargetSelector
)
from .scheduler.error_handler import DispatcherLoadError
from .signals import signal_number

logger = logging.getLogger(__name__)

DISPATCHER_METHODS = (
    'kill_containers',
    'netem_delay_containers',
    'netem_loss_random_containers',
    'netem_loss_state_containers',
)


class DryRunDispatcher(IActionDispatcher):
    """Logs every chaos action instead of executing it"""

    def __init__(self):
        self.calls: List[Tuple[str, TargetSelector, ChaosCommand]] = []
        self._lock = threading.Lock()

    def kill_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                        command: KillCommand) -> bool:
        logger.info(f"[dry-run] kill {self._describe_targets(selector)} with "
                    f"{command.signal} ({signal_number(command.signal)})")
        return self._record('kill_containers', selector, command)

    def netem_delay_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                               command: NetemDelayCommand) -> bool:
        logger.info(f"[dry-run] netem delay {command.time}ms +/- {command.jitter}ms "
                    f"on {command.net_interface} of {self._describe_targets(selector)} for {command.duration}s")
        return self._record('netem_delay_containers', selector, command)

    def netem_loss_random_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                                     command: NetemLossRandomCommand) -> bool:
        logger.info(f"[dry-run] netem loss {command.percent}% on {command.net_interface} "
                    f"of {self._describe_targets(selector)} for {command.duration}s")
        return self._record('netem_loss_random_containers', selector, command)

    def netem_loss_state_containers(self, ctx, runtime_client: Any, selector: TargetSelector,
                                    command: NetemLossStateCommand) -> bool:
        logger.info(f"[dry-run] netem loss state p13={command.p13} p31={command.p31} p32={command.p32} "
                    f"p23={command.p23} p14={command.p14} on {command.net_interface} "
                    f"of {self._describe_targets(selector)} for {command.duration}s")
        return self._record('netem_loss_state_containers', selector, command)

    def _record(self, method: str, selector: TargetSelector, command: ChaosCommand) -> bool:
        with self._lock:
            self.calls.append((method, selector, command))
        logger.debug(f"[dry-run] {method} parameters: {asdict(command)}")
        return True

    @staticmethod
    def _describe_targets(selector: TargetSelector) -> str:
        parts = []
        if selector.names:
            parts.append(f"containers {', '.join(selector.names)}")
        if selector.pattern:
            parts.append(f"containers matching {selector.pattern!r}")
        return " and ".join(parts) if parts else "all containers"


def load_dispatcher(spec: str) -> IActionDispatcher:
    """
    Resolve a dispatcher from a spec string.

    ``dry-run`` selects DryRunDispatcher. Anything else must be
    ``package.module:attribute`` where the attribute is either a dispatcher
    instance or a callable returning one.
    """
    if spec in ('dry-run', 'dryrun'):
        return DryRunDispatcher()

    module_name, sep, attribute = spec.partition(':')
    if not sep or not module_name or not attribute:
        raise DispatcherLoadError(f"Dispatcher must be 'dry-run' or 'module:attribute', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise DispatcherLoadError(f"Cannot import dispatcher module {module_name}: {e}") from e

    try:
        target = getattr(module, attribute)
    except AttributeError as e:
        raise DispatcherLoadError(f"Module {module_name} has no attribute {attribute}") from e

    dispatcher = target
    if callable(target) and not _implements_dispatcher(target):
        try:
            dispatcher = target()
        except Exception as e:
            raise DispatcherLoadError(f"Failed to create dispatcher from {spec}: {e}") from e

    if not _implements_dispatcher(dispatcher):
        raise DispatcherLoadError(f"{spec} does not provide the methods {', '.join(DISPATCHER_METHODS)}")

    logger.info(f"Loaded dispatcher {type(dispatcher).__name__} from {spec}")
    return dispatcher


def _implements_dispatcher(candidate: Any) -> bool:
    if isinstance(candidate, type):
        return False
    return all(callable(getattr(candidate, name, None)) for name in DISPATCHER_METHODS)
