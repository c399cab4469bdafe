import pytest

from screenstate.observable import ObservableState
from screenstate.timers import ManualTimerBackend


@pytest.fixture
def clock():
    return ManualTimerBackend()


@pytest.fixture
def counter_state():
    return ObservableState(0, name="test.counter")
