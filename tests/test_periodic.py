# tests/test_periodic.py
import threading

import pytest

from screenstate.metrics import render_prometheus, sample
from screenstate.periodic import PeriodicTaskController


def plus_one(n):
    return n + 1


def test_first_tick_after_one_full_period(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.first")
    ctl.start(2, plus_one)
    clock.advance(1.9)
    assert counter_state.get() == 0
    clock.advance(0.1)
    assert counter_state.get() == 1


def test_ticks_at_2_and_4_then_set_period(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.scenario")
    ctl.start(2, plus_one)
    clock.advance(4.5)
    assert counter_state.get() == 2
    assert [t for t, _ in clock.fired] == [2.0, 4.0]

    ctl.set_period(1)
    clock.advance(0.9)
    assert counter_state.get() == 2
    clock.advance(0.1)  # t=5.5
    assert counter_state.get() == 3
    assert clock.fired[-1][0] == 5.5
    assert ctl.period_seconds == 1


def test_advance_five_seconds_gives_two_ticks(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.five")
    ctl.start(2, plus_one)
    clock.advance(5)
    assert counter_state.get() == 2


def test_stop_then_restart_never_fires_old_period(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.restart")
    ctl.start(2, plus_one)
    clock.advance(1)
    ctl.stop()
    ctl.start(3, plus_one)
    clock.advance(2.5)  # old timer would have fired at t=2
    assert counter_state.get() == 0
    clock.advance(0.5)  # t=4, new period from t=1
    assert counter_state.get() == 1
    assert clock.peak_active == 1


def test_at_most_one_timer_across_call_sequences(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.single")
    for step in range(20):
        if step % 5 == 0:
            ctl.stop()
        elif step % 3 == 0:
            ctl.set_period(step % 4)
        else:
            ctl.start(step % 3 + 1, plus_one)
        clock.advance(0.7)
        assert clock.active_count() == (1 if ctl.is_running() else 0)
    assert clock.peak_active == 1


def test_start_while_running_rearms_fresh(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.rearm")
    ctl.start(2, plus_one)
    clock.advance(1.5)
    ctl.start()
    assert ctl.is_running()
    clock.advance(1.5)  # t=3; the re-armed timer is due at 3.5
    assert counter_state.get() == 0
    clock.advance(0.5)
    assert counter_state.get() == 1
    assert clock.active_count() == 1


@pytest.mark.parametrize("period", [0, -1, -10])
def test_non_positive_period_is_clamped_to_one(clock, counter_state, period):
    ctl = PeriodicTaskController(counter_state, clock, name="t.clamp")
    ctl.start(period, plus_one)
    assert ctl.period_seconds == 1
    clock.advance(3)
    assert counter_state.get() == 3

    ctl.set_period(period)
    assert ctl.period_seconds == 1


def test_set_period_while_stopped_only_stores(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.store")
    ctl.set_period(5)
    assert not ctl.is_running()
    assert clock.active_count() == 0
    ctl.start()
    clock.advance(5)
    assert counter_state.get() == 1


def test_stop_when_not_running_is_noop(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.idle")
    assert ctl.is_running() is False
    ctl.stop()
    ctl.stop()
    assert ctl.is_running() is False


def test_start_without_mutation_raises(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, name="t.nomut")
    with pytest.raises(ValueError):
        ctl.start(1)
    assert not ctl.is_running()


def test_autostart_is_configurable(clock, counter_state):
    running = PeriodicTaskController(counter_state, clock, mutate=plus_one, autostart=True, name="t.auto")
    assert running.is_running()
    assert running.running.get() is True
    running.stop()
    idle = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.manual")
    assert not idle.is_running()


def test_failing_mutation_reports_and_keeps_ticking(clock, counter_state):
    errors = []
    calls = {"n": 0}

    def flaky(n):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("boom")
        return n + 1

    before = sample("screenstate_ticks_total", task="t.flaky", outcome="error")
    ctl = PeriodicTaskController(counter_state, clock, mutate=flaky, on_error=errors.append, name="t.flaky")
    ctl.start(1)
    clock.advance(3)
    assert len(errors) == 1 and isinstance(errors[0], RuntimeError)
    assert counter_state.get() == 2
    assert ctl.is_running()
    assert sample("screenstate_ticks_total", task="t.flaky", outcome="error") == before + 1


def test_default_error_handler_logs(clock, counter_state, caplog):
    ctl = PeriodicTaskController(counter_state, clock, mutate=lambda n: 1 / 0, name="t.log")
    ctl.start(1)
    clock.advance(1)
    assert "tick failed" in caplog.text
    assert ctl.is_running()


def test_stale_tick_is_dropped_after_stop(counter_state):
    # backend that cannot retract callbacks: keeps every armed callback
    class Leaky:
        def __init__(self):
            self.callbacks = []

        def schedule(self, period, callback, *, name=""):
            self.callbacks.append(callback)
            return len(self.callbacks)

        def cancel(self, handle):
            pass

    backend = Leaky()
    ctl = PeriodicTaskController(counter_state, backend, mutate=plus_one, name="t.stale")
    ctl.start(1)
    old_tick = backend.callbacks[0]
    ctl.stop()
    old_tick()
    assert counter_state.get() == 0

    ctl.start(2)
    old_tick()
    assert counter_state.get() == 0
    backend.callbacks[-1]()
    assert counter_state.get() == 1


def test_subscriber_may_stop_controller_from_tick(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.reentrant")
    counter_state.subscribe(lambda v: ctl.stop() if v >= 2 else None)
    ctl.start(1)
    clock.advance(10)
    assert counter_state.get() == 2
    assert not ctl.is_running()
    assert clock.active_count() == 0


def test_running_flag_is_observable(clock, counter_state):
    seen = []
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.flag")
    ctl.running.subscribe(seen.append)
    ctl.start(1)
    ctl.stop()
    ctl.stop()
    assert seen == [True, False]


def test_tick_shows_up_in_prometheus_text(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.exposition")
    ctl.start(1)
    clock.advance(1)
    text = render_prometheus().decode("utf-8")
    assert 'screenstate_ticks_total{task="t.exposition",outcome="ok"} 1.0' in text


def test_running_flag_matches_controller_across_threads(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.race")

    def flip(n):
        for i in range(n):
            (ctl.start if i % 2 == 0 else ctl.stop)()

    threads = [threading.Thread(target=flip, args=(200,)), threading.Thread(target=flip, args=(201,))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert ctl.running.get() is ctl.is_running()


def test_infinite_period_is_clamped(clock, counter_state):
    ctl = PeriodicTaskController(counter_state, clock, mutate=plus_one, name="t.inf")
    ctl.start(float("inf"))
    assert ctl.period_seconds == 1
    ctl.set_period(float("-inf"))
    assert ctl.period_seconds == 1
