"""
Signal Table - Canonical Linux signal names accepted by the kill action
"""
import logging
from types import MappingProxyType
from typing import Mapping

from .scheduler.error_handler import InvalidSignalError

logger = logging.getLogger(__name__)


# Values follow the Linux x86 numbering the container runtime expects
LINUX_SIGNALS: Mapping[str, int] = MappingProxyType({
    "SIGHUP": 1,
    "SIGINT": 2,
    "SIGQUIT": 3,
    "SIGILL": 4,
    "SIGTRAP": 5,
    "SIGIOT": 6,
    "SIGBUS": 7,
    "SIGFPE": 8,
    "SIGKILL": 9,
    "SIGUSR1": 10,
    "SIGSEGV": 11,
    "SIGUSR2": 12,
    "SIGPIPE": 13,
    "SIGALRM": 14,
    "SIGTERM": 15,
    "SIGSTKFLT": 16,
    "SIGCHLD": 17,
    "SIGCONT": 18,
    "SIGSTOP": 19,
    "SIGTSTP": 20,
    "SIGTTIN": 21,
    "SIGTTOU": 22,
    "SIGURG": 23,
    "SIGXCPU": 24,
    "SIGXFSZ": 25,
    "SIGVTALRM": 26,
    "SIGPROF": 27,
    "SIGWINCH": 28,
    "SIGIO": 29,
    "SIGPWR": 30,
})


def validate_signal(name: str) -> str:
    """Return the signal name if it is in the table, raise InvalidSignalError otherwise"""
    if not isinstance(name, str) or name not in LINUX_SIGNALS:
        error = InvalidSignalError(name)
        logger.error(str(error))
        raise error
    return name


def signal_number(name: str) -> int:
    """Numeric code for a signal name, for dispatchers that need it"""
    return LINUX_SIGNALS[validate_signal(name)]
