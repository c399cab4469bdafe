from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Generic, Hashable, Optional, TypeVar

from .metrics import TICK_LATENCY_SECONDS, TICKS_TOTAL, TIMER_ACTIVE
from .observable import ObservableState
from .timers import TimerBackend
from .utils import clamp_period

T = TypeVar("T")

Mutation = Callable[[T], T]
ErrorCallback = Callable[[BaseException], None]

logger = logging.getLogger(__name__)


class PeriodicTaskController(Generic[T]):
    """
    Applies `mutate` to `state` every `period_seconds`, with at most one
    armed timer at any time.

    Every arm bumps a generation counter and the tick closure carries the
    generation it was armed with. A tick whose generation is no longer
    current is dropped, so a callback the backend could not retract in
    time never applies a mutation after `stop()` / `set_period()` returned.
    Ticks and state transitions share one lock, which also keeps ticks
    from overlapping.
    """

    def __init__(
        self,
        state: ObservableState[T],
        backend: TimerBackend,
        *,
        mutate: Optional[Mutation] = None,
        period_seconds: int = 1,
        autostart: bool = False,
        on_error: Optional[ErrorCallback] = None,
        name: str = "periodic",
    ) -> None:
        self.state = state
        self.name = name
        self.running: ObservableState[bool] = ObservableState(False, name=f"{name}.running")
        self._backend = backend
        self._mutate = mutate
        self._period = clamp_period(period_seconds)
        self._on_error = on_error or self._log_error
        self._lock = threading.RLock()
        self._handle: Optional[Hashable] = None
        self._generation = 0

        if autostart:
            self.start()

    # ----- queries -----
    @property
    def period_seconds(self) -> int:
        return self._period

    def is_running(self) -> bool:
        with self._lock:
            return self._handle is not None

    # ----- transitions -----
    def start(self, period_seconds: Optional[int] = None, mutate: Optional[Mutation] = None) -> None:
        """Arm a fresh timer; an existing one is cancelled first."""
        with self._lock:
            if mutate is not None:
                self._mutate = mutate
            if self._mutate is None:
                raise ValueError(f"{self.name}: no mutation to run")
            if period_seconds is not None:
                self._period = clamp_period(period_seconds)
            self._disarm()
            self._arm()
            logger.info("[%s] started, period=%ss", self.name, self._period)
            self.running.set(True)

    def stop(self) -> None:
        with self._lock:
            was_running = self._handle is not None
            self._disarm()
            if was_running:
                logger.info("[%s] stopped", self.name)
                self.running.set(False)

    def set_period(self, period_seconds: int) -> None:
        with self._lock:
            self._period = clamp_period(period_seconds)
            if self._handle is None:
                return
            self._disarm()
            self._arm()
            logger.info("[%s] re-armed, period=%ss", self.name, self._period)

    # ----- internals -----
    def _arm(self) -> None:
        self._generation += 1
        generation = self._generation
        self._handle = self._backend.schedule(
            self._period, lambda: self._tick(generation), name=self.name
        )
        TIMER_ACTIVE.labels(task=self.name).set(1)

    def _disarm(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._generation += 1
        self._backend.cancel(handle)
        TIMER_ACTIVE.labels(task=self.name).set(0)

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._handle is None:
                TICKS_TOTAL.labels(task=self.name, outcome="dropped").inc()
                logger.debug("[%s] dropped stale tick (gen %s)", self.name, generation)
                return

            started = time.perf_counter()
            try:
                self.state.update(self._mutate)
            except Exception as exc:
                TICKS_TOTAL.labels(task=self.name, outcome="error").inc()
                self._report(exc)
                return
            TICK_LATENCY_SECONDS.labels(task=self.name).observe(time.perf_counter() - started)
            TICKS_TOTAL.labels(task=self.name, outcome="ok").inc()

    def _report(self, exc: BaseException) -> None:
        try:
            self._on_error(exc)
        except Exception:
            logger.exception("[%s] error callback failed", self.name)

    def _log_error(self, exc: BaseException) -> None:
        logger.error("[%s] tick failed: %s", self.name, exc, exc_info=exc)

    def __repr__(self) -> str:
        return f"PeriodicTaskController(name={self.name!r}, period={self._period}, running={self.is_running()})"
