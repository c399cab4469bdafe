from __future__ import annotations
import logging
from typing import Callable, Optional

from .observable import ObservableState
from .periodic import PeriodicTaskController
from .screen import Screen
from .timers import TimerBackend
from .utils import clamp_period, parse_interval

logger = logging.getLogger(__name__)

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def increment(n: int) -> int:
    return n + 1


def decrement(n: int) -> int:
    return n - 1


def reset(_: int) -> int:
    return 0


auto_tick = increment


def apply_overflow(n: int, policy: str = "unbounded") -> int:
    """
    unbounded: Python int, no limit
    saturate:  clamp to the signed 32-bit range
    wrap:      two's complement wrap-around in the signed 32-bit range
    """
    if policy == "unbounded":
        return n
    if policy == "saturate":
        return max(INT32_MIN, min(INT32_MAX, n))
    if policy == "wrap":
        return (n - INT32_MIN) % (2 ** 32) + INT32_MIN
    raise ValueError(f"unknown overflow policy {policy!r}")


class CounterScreen(Screen):
    """Auto-incrementing counter with buttons and an interval setting."""
    name = "counter"

    def __init__(
        self,
        backend: TimerBackend,
        *,
        interval_seconds: int = 1,
        autostart: bool = True,
        overflow: str = "unbounded",
        initial: int = 0,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        super().__init__()
        apply_overflow(0, overflow)  # reject unknown policies up front
        self.overflow = overflow
        self.count: ObservableState[int] = ObservableState(initial, name="counter.count")
        self.interval: ObservableState[int] = ObservableState(clamp_period(interval_seconds), name="counter.interval")
        self.auto = PeriodicTaskController(
            self.count,
            backend,
            mutate=self._bounded(auto_tick),
            period_seconds=self.interval.get(),
            autostart=autostart,
            on_error=on_error,
            name="counter.auto",
        )

    def _bounded(self, fn: Callable[[int], int]) -> Callable[[int], int]:
        return lambda n: apply_overflow(fn(n), self.overflow)

    # ----- button handlers -----
    def increment(self) -> int:
        return self.count.update(self._bounded(increment))

    def decrement(self) -> int:
        return self.count.update(self._bounded(decrement))

    def reset(self) -> int:
        return self.count.update(reset)

    def toggle_auto(self) -> bool:
        if self.auto.is_running():
            self.auto.stop()
        else:
            self.auto.start(self.interval.get())
        return self.auto.is_running()

    # ----- settings screen -----
    def set_interval(self, seconds: int) -> int:
        seconds = clamp_period(seconds)
        self.interval.set(seconds)
        self.auto.set_period(seconds)
        logger.info("[counter] interval set to %ss", seconds)
        return seconds

    def apply_interval_input(self, text: str | None) -> int:
        """Confirm handler for the settings dialog; bad input keeps the current interval."""
        return self.set_interval(parse_interval(text, fallback=self.interval.get()))

    def _stop_timers(self) -> None:
        self.auto.stop()
