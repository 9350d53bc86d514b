import threading

import pytest

from knockd.config import Config
from knockd.logger import Logger
from knockd.tracker import KnockState, Tracker

PORTS = (1001, 1002, 1003)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "activations.log"


@pytest.fixture
def clock():
    return FakeClock()


def make_tracker(log_path, clock, sequence_timeout_ms=5000, inter_knock_timeout_ms=1000):
    config = Config(
        trigger_ports=PORTS,
        sequence_timeout_ms=sequence_timeout_ms,
        inter_knock_timeout_ms=inter_knock_timeout_ms,
        log_file=str(log_path),
    )
    return Tracker(config, Logger(log_path), clock=clock)


def activations(log_path):
    if not log_path.exists():
        return []
    return [
        line.split("service activation ", 1)[1]
        for line in log_path.read_text(encoding="utf-8").splitlines()
        if "INFO: service activation " in line
    ]


def knock_all(tracker, ip, ports):
    for port in ports:
        tracker.record_knock(ip, port)


def test_correct_sequence_activates(log_path, clock):
    tracker = make_tracker(log_path, clock)
    knock_all(tracker, "10.0.0.1", PORTS)
    assert activations(log_path) == ["<10.0.0.1>"]


def test_incomplete_sequence_does_not_activate(log_path, clock):
    tracker = make_tracker(log_path, clock)
    knock_all(tracker, "10.0.0.1", PORTS[:-1])
    assert activations(log_path) == []


def test_wrong_port_resets_sequence(log_path, clock):
    tracker = make_tracker(log_path, clock)
    knock_all(tracker, "10.0.0.1", [1001, 1003, 1002, 1003])
    assert activations(log_path) == []
    knock_all(tracker, "10.0.0.1", PORTS)
    assert activations(log_path) == ["<10.0.0.1>"]


def test_inter_knock_timeout_resets(log_path, clock):
    tracker = make_tracker(log_path, clock)
    tracker.record_knock("10.0.0.1", 1001)
    clock.now = 1.5
    tracker.record_knock("10.0.0.1", 1002)
    tracker.record_knock("10.0.0.1", 1003)
    assert activations(log_path) == []


def test_inter_knock_gap_equal_to_limit_is_allowed(log_path, clock):
    tracker = make_tracker(log_path, clock)
    tracker.record_knock("10.0.0.1", 1001)
    clock.now = 1.0
    tracker.record_knock("10.0.0.1", 1002)
    clock.now = 2.0
    tracker.record_knock("10.0.0.1", 1003)
    assert activations(log_path) == ["<10.0.0.1>"]


def test_sequence_timeout_resets(log_path, clock):
    tracker = make_tracker(log_path, clock, sequence_timeout_ms=1500)
    tracker.record_knock("10.0.0.1", 1001)
    clock.now = 0.9
    tracker.record_knock("10.0.0.1", 1002)
    clock.now = 1.8
    tracker.record_knock("10.0.0.1", 1003)
    assert activations(log_path) == []


def test_restart_after_timeout_can_complete(log_path, clock):
    tracker = make_tracker(log_path, clock)
    tracker.record_knock("10.0.0.1", 1001)
    clock.now = 10.0
    knock_all(tracker, "10.0.0.1", PORTS)
    assert activations(log_path) == ["<10.0.0.1>"]


def test_addresses_are_tracked_independently(log_path, clock):
    tracker = make_tracker(log_path, clock)
    for port in PORTS:
        tracker.record_knock("10.0.0.1", port)
        tracker.record_knock("10.0.0.2", 9999)
        tracker.record_knock("10.0.0.3", port)
    assert sorted(activations(log_path)) == ["<10.0.0.1>", "<10.0.0.3>"]


def test_state_is_cleared_after_activation(log_path, clock):
    tracker = make_tracker(log_path, clock)
    knock_all(tracker, "10.0.0.1", PORTS)
    tracker.record_knock("10.0.0.1", 1003)
    assert activations(log_path) == ["<10.0.0.1>"]
    knock_all(tracker, "10.0.0.1", PORTS)
    assert activations(log_path) == ["<10.0.0.1>", "<10.0.0.1>"]


def test_concurrent_knocks_from_many_addresses(log_path, clock):
    tracker = make_tracker(log_path, clock)
    ips = [f"192.168.0.{n}" for n in range(1, 21)]
    threads = [threading.Thread(target=knock_all, args=(tracker, ip, PORTS)) for ip in ips]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(activations(log_path)) == sorted(f"<{ip}>" for ip in ips)


def test_knock_state_starts_at_beginning():
    state = KnockState()
    assert (state.index, state.start_time, state.last_knock) == (0, 0.0, 0.0)