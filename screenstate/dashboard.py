from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .events import Reading
from .history import ReadingWindow, append_window
from .periodic import PeriodicTaskController
from .screen import Screen
from .timers import TimerBackend
from .utils import now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadingStats:
    current: float
    average: float
    minimum: float
    maximum: float
    count: int


def summarize(readings: Sequence[Reading]) -> Optional[ReadingStats]:
    if not readings:
        return None
    values = [r.value for r in readings]
    return ReadingStats(
        current=values[-1],
        average=round(sum(values) / len(values), 2),
        minimum=min(values),
        maximum=max(values),
        count=len(values),
    )


class TemperatureSource:
    """Synthetic sensor: uniform values in [low, high], one decimal."""
    def __init__(self, low: float = 18.0, high: float = 30.0, rng: Optional[random.Random] = None,
                 clock: Callable[[], int] = now_ms) -> None:
        if low > high:
            raise ValueError(f"temperature range is empty: {low} > {high}")
        self.low = low
        self.high = high
        self._rng = rng or random.Random()
        self._clock = clock

    def read(self) -> Reading:
        return Reading(value=round(self._rng.uniform(self.low, self.high), 1), timestamp_ms=self._clock())


class DashboardScreen(Screen):
    """Simulated temperature dashboard with a pausable generator."""
    name = "dashboard"

    def __init__(
        self,
        backend: TimerBackend,
        *,
        period_seconds: int = 2,
        window: int = 20,
        autostart: bool = True,
        source: Optional[TemperatureSource] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        super().__init__()
        self.source = source or TemperatureSource()
        self.readings = ReadingWindow(window, name="dashboard.readings")
        self.generator = PeriodicTaskController(
            self.readings,
            backend,
            mutate=self._next_window,
            period_seconds=period_seconds,
            autostart=autostart,
            on_error=on_error,
            name="dashboard.generator",
        )

    def _next_window(self, current: Tuple[Reading, ...]) -> Tuple[Reading, ...]:
        return append_window(current, self.source.read(), self.readings.size)

    @property
    def running(self):
        return self.generator.running

    def toggle(self) -> bool:
        """Pause/resume button."""
        if self.generator.is_running():
            self.generator.stop()
        else:
            self.generator.start()
        return self.generator.is_running()

    def stats(self) -> Optional[ReadingStats]:
        return summarize(self.readings.get())

    def _stop_timers(self) -> None:
        self.generator.stop()
