"""
Timer backends used by the periodic task controller.

A backend arms a repeating callback and cancels it again. Cancellation
must be synchronous: once `cancel` returns the backend will not start
another run of that timer (a run already executing may finish).
"""
from __future__ import annotations

import itertools
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class TimerBackend(Protocol):
    def schedule(self, period_seconds: int, callback: Callable[[], None], *, name: str = "") -> Hashable: ...
    def cancel(self, handle: Hashable) -> None: ...


class APSchedulerBackend:
    """
    Repeating timers as APScheduler interval jobs.

    The first run happens one full period after `schedule`; `max_instances=1`
    and `coalesce=True` keep runs of the same job from overlapping or piling up.
    """
    def __init__(self, scheduler: Optional[BaseScheduler] = None) -> None:
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def schedule(self, period_seconds: int, callback: Callable[[], None], *, name: str = "") -> str:
        if not self.scheduler.running:
            self.scheduler.start()
        job_id = f"{name or 'periodic'}-{uuid.uuid4().hex[:12]}"
        self.scheduler.add_job(
            callback,
            IntervalTrigger(seconds=period_seconds, timezone="UTC"),
            id=job_id,
            name=name or job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.debug("[timers] armed %s every %ss", job_id, period_seconds)
        return job_id

    def cancel(self, handle: str) -> None:
        try:
            self.scheduler.remove_job(handle)
            logger.debug("[timers] cancelled %s", handle)
        except JobLookupError:
            pass

    def shutdown(self) -> None:
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)


@dataclass
class _ManualTimer:
    period: float
    next_due: float
    callback: Callable[[], None]
    name: str


class ManualTimerBackend:
    """
    Fake clock for deterministic tests and replays.

    Time only moves in `advance`; due timers fire in time order (ties by
    arming order) and a timer cancelled by an earlier callback never fires.
    """
    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._timers: Dict[int, _ManualTimer] = {}
        self._ids = itertools.count(1)
        self.peak_active = 0
        self.fired: list[tuple[float, str]] = []

    @property
    def now(self) -> float:
        return self._now

    def schedule(self, period_seconds: int, callback: Callable[[], None], *, name: str = "") -> int:
        handle = next(self._ids)
        self._timers[handle] = _ManualTimer(float(period_seconds), self._now + period_seconds, callback, name)
        self.peak_active = max(self.peak_active, len(self._timers))
        return handle

    def cancel(self, handle: int) -> None:
        self._timers.pop(handle, None)

    def active_count(self) -> int:
        return len(self._timers)

    def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while True:
            due = [(t.next_due, h) for h, t in self._timers.items() if t.next_due <= target]
            if not due:
                break
            when, handle = min(due)
            timer = self._timers[handle]
            self._now = when
            timer.next_due = when + timer.period
            self.fired.append((when, timer.name))
            timer.callback()
        self._now = target
