"""
Tests for schedule file loading
"""
import pytest
from ipaddress import ip_address

from container_chaos.schedule_file import ScheduleEntry, ScheduleLoader, parse_duration
from container_chaos.scheduler.error_handler import ScheduleConfigError


class TestParseDuration:
    """Test duration parsing"""

    @pytest.mark.parametrize("value,expected", [
        (0, 0.0),
        (5, 5.0),
        (2.5, 2.5),
        ("10", 10.0),
        ("1.5", 1.5),
        ("500ms", 0.5),
        ("30s", 30.0),
        ("2m", 120.0),
        ("1h", 3600.0),
        ("1m30s", 90.0),
    ])
    def test_valid_durations(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [
        -1, "", "abc", "10x", "s10", "1m 30s", "nan", "inf", True, None, [1],
        float("nan"), float("inf"), float("-inf"),
    ])
    def test_invalid_durations(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestScheduleLoader:
    """Test ScheduleLoader"""

    def test_load_all_actions_with_defaults(self):
        """Test each action fills in its defaults"""
        entries = ScheduleLoader.load_from_string("""
schedules:
  - action: kill
    names: [c1]
  - action: netem_delay
    pattern: "web.*"
    duration: 30s
  - action: netem_loss_random
    duration: 10
    percent: 30
  - action: netem_loss_rate
    duration: 1m
""")

        assert [e.action for e in entries] == ['kill', 'netem_delay', 'netem_loss_random', 'netem_loss_rate']
        assert [e.index for e in entries] == [0, 1, 2, 3]

        kill = entries[0].arguments
        assert kill == {'interval': 0.0, 'names': ["c1"], 'pattern': "", 'signal': "SIGKILL"}

        delay = entries[1].arguments
        assert delay['duration'] == 30.0
        assert delay['net_interface'] == "eth0"
        assert delay['ips'] == []
        assert delay['time'] == 100
        assert delay['jitter'] == 10
        assert delay['correlation'] == 20.0
        assert delay['pattern'] == "web.*"

        loss = entries[2].arguments
        assert loss['percent'] == 30
        assert loss['correlation'] == 0.0

        rate = entries[3].arguments
        assert rate['duration'] == 60.0
        assert (rate['p13'], rate['p31'], rate['p32'], rate['p23'], rate['p14']) == (0.0, 100.0, 0.0, 100.0, 0.0)

    def test_interval_and_targets(self):
        """Test interval parsing and target IP conversion"""
        entries = ScheduleLoader.load_from_string("""
schedules:
  - action: netem_delay
    interval: 1m
    duration: 10s
    interface: eth1
    target: [10.0.0.1, "::1"]
""")

        arguments = entries[0].arguments
        assert entries[0].interval == 60.0
        assert arguments['net_interface'] == "eth1"
        assert arguments['ips'] == [ip_address("10.0.0.1"), ip_address("::1")]
        assert 'interface' not in arguments
        assert 'target' not in arguments

    def test_single_name_string_is_accepted(self):
        entry = ScheduleLoader.parse_entry({'action': 'kill', 'names': "c1"})
        assert entry.arguments['names'] == ["c1"]

    def test_load_json(self):
        """Test JSON documents load through the YAML parser"""
        entries = ScheduleLoader.load_from_string('{"schedules": [{"action": "kill", "signal": "SIGTERM"}]}')
        assert entries[0].arguments['signal'] == "SIGTERM"

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "schedules.yaml"
        path.write_text("schedules:\n  - action: kill\n    signal: SIGINT\n")

        entries = ScheduleLoader.load_from_file(path)

        assert entries[0].arguments['signal'] == "SIGINT"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScheduleLoader.load_from_file(tmp_path / "missing.yaml")

    @pytest.mark.parametrize("text", [
        "schedules: [",
        "- action: kill",
        "schedules: {}",
        "schedules: []",
        "other: 1",
    ])
    def test_invalid_documents(self, text):
        with pytest.raises(ScheduleConfigError):
            ScheduleLoader.load_from_string(text)

    @pytest.mark.parametrize("raw,message", [
        ("kill", "expected a mapping"),
        ({'action': 'restart'}, "unknown action"),
        ({}, "unknown action"),
        ({'action': 'kill', 'duration': 5}, "unknown keys"),
        ({'action': 'kill', 'signal': "BOGUS"}, "Unexpected signal: BOGUS"),
        ({'action': 'kill', 'interval': "-5"}, "Invalid duration"),
        ({'action': 'kill', 'names': [1, 2]}, "'names' must be a list of strings"),
        ({'action': 'netem_delay'}, "requires 'duration'"),
        ({'action': 'netem_delay', 'duration': "forever"}, "Invalid duration"),
        ({'action': 'netem_loss_random', 'duration': 5, 'target': ["not-an-ip"]}, "not-an-ip"),
        ({'action': 'netem_loss_random', 'duration': 5, 'target': 5}, "'target' must be a list"),
    ])
    def test_invalid_entries(self, raw, message):
        with pytest.raises(ScheduleConfigError) as exc_info:
            ScheduleLoader.parse_entry(raw, index=3)

        assert str(exc_info.value).startswith("Schedule 3:")
        assert message in str(exc_info.value)

    def test_error_names_offending_entry(self):
        """Test the failing entry's index is reported"""
        with pytest.raises(ScheduleConfigError, match="Schedule 1:"):
            ScheduleLoader.load_from_string("""
schedules:
  - action: kill
  - action: kill
    signal: SIGFOO
""")

    @pytest.mark.parametrize("value", [".nan", ".inf"])
    def test_non_finite_interval_rejected(self, value):
        """Test YAML NaN and infinity never become a schedule interval"""
        with pytest.raises(ScheduleConfigError, match="Schedule 0: Duration must be finite"):
            ScheduleLoader.load_from_string(f"schedules:\n  - action: kill\n    interval: {value}\n")


class TestScheduleEntry:
    """Test ScheduleEntry"""

    def test_describe_single_shot(self):
        entry = ScheduleEntry(action='kill', arguments={'interval': 0.0, 'names': ["c1"], 'pattern': ""})
        assert entry.describe() == "kill names=['c1'] once"

    def test_describe_repeating(self):
        entry = ScheduleEntry(action='netem_delay', arguments={'interval': 5.0, 'names': [], 'pattern': "web"})
        assert entry.describe() == "netem_delay pattern='web' every 5.0s"

    def test_describe_all_containers(self):
        entry = ScheduleEntry(action='kill', arguments={'interval': 0.0, 'names': [], 'pattern': ""})
        assert entry.describe() == "kill all containers once"
