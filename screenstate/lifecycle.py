from __future__ import annotations
import logging
from typing import Callable, Optional

from .events import EventLogEntry, LifecycleEvent, color_for, label_for
from .history import EventLog
from .observable import ObservableState
from .screen import Screen
from .utils import now_ms

logger = logging.getLogger(__name__)


class LifecycleScreen(Screen):
    """Newest-first log of host lifecycle transitions plus a notifications switch."""
    name = "lifecycle"

    def __init__(
        self,
        *,
        max_entries: Optional[int] = 100,
        notifications_enabled: bool = True,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        super().__init__()
        self.events = EventLog(max_entries, name="lifecycle.events")
        self.notifications: ObservableState[bool] = ObservableState(
            notifications_enabled, name="lifecycle.notifications"
        )
        self._clock = clock

    def on_lifecycle_event(self, event: LifecycleEvent | str) -> Optional[EventLogEntry]:
        if self.destroyed:
            logger.debug("[lifecycle] ignoring %s after destroy", event)
            return None
        entry = EventLogEntry(label=label_for(event), timestamp_ms=self._clock(), color=color_for(event))
        self.events.append(entry)
        return entry

    def toggle_notifications(self, enabled: bool) -> None:
        self.notifications.set(bool(enabled))

    @property
    def current_state(self) -> Optional[str]:
        latest = self.events.latest
        return latest.label if latest else None

    def _stop_timers(self) -> None:
        # no timer on this screen
        pass
