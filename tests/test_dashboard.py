import random

import pytest

from screenstate.dashboard import DashboardScreen, TemperatureSource, summarize
from screenstate.events import Reading


class Sequence:
    """Source that yields 1.0, 2.0, 3.0, ..."""
    def __init__(self):
        self.n = 0

    def read(self):
        self.n += 1
        return Reading(float(self.n), self.n * 1000)


def test_generates_readings_on_timer(clock):
    screen = DashboardScreen(clock, period_seconds=2, source=Sequence())
    clock.advance(6)
    assert screen.readings.values() == [1.0, 2.0, 3.0]


def test_window_holds_last_20(clock):
    screen = DashboardScreen(clock, period_seconds=1, source=Sequence())
    clock.advance(25)
    assert screen.readings.values() == [float(v) for v in range(6, 26)]


def test_toggle_pauses_and_resumes(clock):
    screen = DashboardScreen(clock, period_seconds=1, source=Sequence())
    clock.advance(2)
    assert screen.toggle() is False
    assert screen.running.get() is False
    clock.advance(5)
    assert len(screen.readings) == 2
    assert screen.toggle() is True
    clock.advance(1)
    assert len(screen.readings) == 3


def test_autostart_off(clock):
    screen = DashboardScreen(clock, autostart=False, source=Sequence())
    clock.advance(10)
    assert screen.readings.get() == ()
    assert screen.stats() is None


def test_stats():
    stats = summarize([Reading(20.0, 1), Reading(22.0, 2), Reading(27.5, 3)])
    assert stats.current == 27.5
    assert stats.minimum == 20.0 and stats.maximum == 27.5
    assert stats.average == 23.17
    assert stats.count == 3


def test_temperature_source_range():
    src = TemperatureSource(18.0, 30.0, rng=random.Random(7), clock=lambda: 123)
    for _ in range(200):
        r = src.read()
        assert 18.0 <= r.value <= 30.0
        assert r.value == round(r.value, 1)
        assert r.timestamp_ms == 123
    with pytest.raises(ValueError):
        TemperatureSource(30.0, 18.0)


def test_broken_source_does_not_stop_generator(clock):
    errors = []

    class Flaky(Sequence):
        def read(self):
            r = super().read()
            if r.value == 2.0:
                raise IOError("sensor glitch")
            return r

    screen = DashboardScreen(clock, period_seconds=1, source=Flaky(), on_error=errors.append)
    clock.advance(3)
    assert screen.readings.values() == [1.0, 3.0]
    assert len(errors) == 1


def test_destroy_stops_generator(clock):
    screen = DashboardScreen(clock, period_seconds=1, source=Sequence())
    clock.advance(1)
    screen.destroy()
    clock.advance(5)
    assert len(screen.readings) == 1
