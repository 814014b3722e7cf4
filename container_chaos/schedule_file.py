"""
Schedule File - Loading chaos schedules from YAML or JSON documents
"""
import ipaddress
import math
import re
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from .scheduler.error_handler import InvalidSignalError, ScheduleConfigError
from .signals import validate_signal

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h)')
_DURATION_UNITS = {'ms': 0.001, 's': 1.0, 'm': 60.0, 'h': 3600.0}

COMMON_DEFAULTS: Dict[str, Any] = {
    'interval': 0,
    'names': [],
    'pattern': "",
}

NETEM_DEFAULTS: Dict[str, Any] = {
    'interface': "eth0",
    'target': [],
    'image': "",
}

ACTION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'kill': {
        'signal': "SIGKILL",
    },
    'netem_delay': {
        'time': 100,
        'jitter': 10,
        'correlation': 20.0,
        'distribution': "",
    },
    'netem_loss_random': {
        'percent': 0.0,
        'correlation': 0.0,
    },
    'netem_loss_rate': {
        'p13': 0.0,
        'p31': 100.0,
        'p32': 0.0,
        'p23': 100.0,
        'p14': 0.0,
    },
}

# File keys whose API argument name differs
_RENAMED_KEYS = {'interface': 'net_interface', 'target': 'ips'}


def parse_duration(value: Union[int, float, str]) -> float:
    """Parse a duration in seconds; strings may use ms, s, m, h suffixes (e.g. 1m30s)"""
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"Duration must be finite: {value}")
        if value < 0:
            raise ValueError(f"Duration must not be negative: {value}")
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("Empty duration")
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return float(text)

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total


@dataclass
class ScheduleEntry:
    """One schedule from a schedule file, ready to pass to ChaosAPI"""
    action: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    index: int = 0

    @property
    def interval(self) -> float:
        return self.arguments['interval']

    def describe(self) -> str:
        args = self.arguments
        targets = []
        if args['names']:
            targets.append(f"names={args['names']}")
        if args['pattern']:
            targets.append(f"pattern={args['pattern']!r}")
        when = "once" if args['interval'] == 0 else f"every {args['interval']}s"
        return f"{self.action} {' '.join(targets) or 'all containers'} {when}"


class ScheduleLoader:
    """Utility class for loading and validating schedule files"""

    @staticmethod
    def load_from_file(file_path: Union[str, Path]) -> List[ScheduleEntry]:
        """Load schedule entries from a YAML or JSON file."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Schedule file not found: {file_path}")

        with open(file_path, 'r') as f:
            config_text = f.read()

        return ScheduleLoader.load_from_string(config_text, source=str(file_path))

    @staticmethod
    def load_from_string(config_text: str, source: str = "<string>") -> List[ScheduleEntry]:
        """Load schedule entries from YAML (or JSON) text."""
        try:
            document = yaml.safe_load(config_text)
        except yaml.YAMLError as e:
            raise ScheduleConfigError(f"Invalid YAML syntax in {source}: {e}")

        if not isinstance(document, dict) or not isinstance(document.get('schedules'), list):
            raise ScheduleConfigError(f"{source} must contain a 'schedules' list")
        if not document['schedules']:
            raise ScheduleConfigError(f"{source} defines no schedules")

        return [
            ScheduleLoader.parse_entry(raw, index)
            for index, raw in enumerate(document['schedules'])
        ]

    @staticmethod
    def parse_entry(raw: Any, index: int = 0) -> ScheduleEntry:
        """Validate one raw schedule mapping and convert it to API arguments"""
        if not isinstance(raw, dict):
            raise ScheduleConfigError(f"Schedule {index}: expected a mapping, got {type(raw).__name__}")

        raw = dict(raw)
        action = raw.pop('action', None)
        if action not in ACTION_DEFAULTS:
            raise ScheduleConfigError(
                f"Schedule {index}: unknown action {action!r}, expected one of {', '.join(ACTION_DEFAULTS)}"
            )

        allowed = dict(COMMON_DEFAULTS)
        if action != 'kill':
            allowed.update(NETEM_DEFAULTS)
            allowed['duration'] = None
        allowed.update(ACTION_DEFAULTS[action])

        unknown = sorted(set(raw) - set(allowed))
        if unknown:
            raise ScheduleConfigError(f"Schedule {index}: unknown keys for {action}: {', '.join(unknown)}")
        if 'duration' in allowed and 'duration' not in raw:
            raise ScheduleConfigError(f"Schedule {index}: {action} requires 'duration'")

        values = {key: raw.get(key, default) for key, default in allowed.items()}

        try:
            values['interval'] = parse_duration(values['interval'])
            if 'duration' in values:
                values['duration'] = parse_duration(values['duration'])
        except ValueError as e:
            raise ScheduleConfigError(f"Schedule {index}: {e}")

        names = values['names']
        if isinstance(names, str):
            names = [names]
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ScheduleConfigError(f"Schedule {index}: 'names' must be a list of strings")
        values['names'] = list(names)
        values['pattern'] = str(values['pattern'] or "")

        if action == 'kill':
            try:
                validate_signal(values['signal'])
            except InvalidSignalError as e:
                raise ScheduleConfigError(f"Schedule {index}: {e}")
        else:
            values['target'] = ScheduleLoader._parse_ips(values['target'], index)

        arguments = {_RENAMED_KEYS.get(key, key): value for key, value in values.items()}
        return ScheduleEntry(action=action, arguments=arguments, index=index)

    @staticmethod
    def _parse_ips(raw_ips: Any, index: int) -> list:
        if isinstance(raw_ips, str):
            raw_ips = [raw_ips]
        if not isinstance(raw_ips, list):
            raise ScheduleConfigError(f"Schedule {index}: 'target' must be a list of IP addresses")
        try:
            return [ipaddress.ip_address(str(ip)) for ip in raw_ips]
        except ValueError as e:
            raise ScheduleConfigError(f"Schedule {index}: {e}")
