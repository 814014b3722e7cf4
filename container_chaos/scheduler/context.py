"""
Execution Context - Cancellable handles shared between schedules

A single root context exists per process. Every schedule derives a child from
it; canceling the root cancels every child.
"""
import logging
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class ExecutionContext:
    """Cancellable execution context backed by a threading.Event"""

    def __init__(self, parent: Optional["ExecutionContext"] = None, name: str = "root"):
        self.name = name
        self.parent = parent
        self._event = threading.Event()
        self._children: List["ExecutionContext"] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel this context and every context derived from it"""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)

        logger.debug(f"Context {self.name} cancelled")
        for child in children:
            child.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until canceled or timeout expires; True if canceled"""
        return self._event.wait(timeout)

    def child(self, name: Optional[str] = None) -> "ExecutionContext":
        """Derive a context that is canceled together with this one"""
        child = ExecutionContext(parent=self, name=name or f"{self.name}/child")
        with self._lock:
            already_cancelled = self._event.is_set()
            if not already_cancelled:
                self._children.append(child)
        if already_cancelled:
            child.cancel()
        return child

    def release(self) -> None:
        """Cancel this context and detach it from its parent"""
        self.cancel()
        if self.parent is not None:
            self.parent._detach(self)

    def _detach(self, child: "ExecutionContext") -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False

    def __repr__(self):
        state = "cancelled" if self.cancelled else "active"
        return f"ExecutionContext({self.name!r}, {state})"
