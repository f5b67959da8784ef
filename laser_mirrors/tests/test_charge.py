import logging

import pytest

from laser_mirrors.game import ChargeState, ChargeStateMachine


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def machine(clock):
    return ChargeStateMachine(2000.0, clock=clock)


def test_starts_idle(machine):
    assert machine.state is ChargeState.IDLE
    assert machine.progress() == 0.0
    assert not machine.tick().charging


def test_contact_starts_charging(machine, clock):
    status = machine.update(True)

    assert status.charging
    assert status.progress == 0.0

    clock.now = 1000.0
    assert machine.tick().progress == pytest.approx(0.5)


def test_repeated_contact_keeps_start_time(machine, clock):
    machine.update(True)
    clock.now = 500.0
    machine.update(True)
    clock.now = 1500.0

    assert machine.update(True).progress == pytest.approx(0.75)


def test_losing_contact_discharges_immediately(machine, clock):
    machine.update(True)
    clock.now = 1900.0

    status = machine.update(False)

    assert not status.charging
    assert status.progress == 0.0
    assert machine.started_at is None


def test_completion_fires_once_then_idles(machine, clock):
    calls = []
    machine.on_complete(lambda: calls.append(clock.now))
    machine.update(True)

    clock.now = 2000.0
    status = machine.tick()

    assert status.completed
    assert status.progress == 1.0
    assert not status.charging
    assert calls == [2000.0]
    assert machine.completions == 1

    clock.now = 5000.0
    assert not machine.tick().completed
    assert calls == [2000.0]


def test_contact_after_completion_starts_new_cycle(machine, clock):
    calls = []
    machine.on_complete(lambda: calls.append(clock.now))
    machine.update(True)
    clock.now = 2500.0
    machine.tick()

    status = machine.update(True)
    assert status.charging
    assert status.progress == 0.0

    clock.now = 4500.0
    machine.tick()
    assert calls == [2500.0, 4500.0]


def test_explicit_timestamps_override_clock(machine):
    machine.update(True, now=100.0)

    assert machine.progress(1100.0) == pytest.approx(0.5)
    assert machine.tick(2100.0).completed


def test_reset_returns_to_idle(machine, clock):
    machine.update(True)
    clock.now = 1000.0

    machine.reset()

    assert machine.state is ChargeState.IDLE
    assert machine.progress() == 0.0


@pytest.mark.parametrize("duration", [0, -5])
def test_duration_must_be_positive(duration):
    with pytest.raises(ValueError):
        ChargeStateMachine(duration)


def test_transitions_are_logged(machine, clock, caplog):
    caplog.set_level(logging.INFO, logger="laser_mirrors.game")

    machine.update(True)
    clock.now = 2000.0
    machine.tick()

    messages = [record.getMessage() for record in caplog.records]
    assert "charging started" in messages
    assert "charge completed (1 so far)" in messages
