import logging
from typing import Callable, Optional, Tuple

from .events import EventLogEntry, color_hex
from .observable import ObservableState, Unsubscribe
from .utils import format_timestamp


class LogRenderer:
    """Headless renderer: logs every value a state publishes."""
    def __init__(self, label: str, fmt: Optional[Callable[[object], str]] = None,
                 level: int = logging.INFO) -> None:
        self.label = label
        self.fmt = fmt or repr
        self.level = level
        self._logger = logging.getLogger("screenstate.render")

    def __call__(self, value) -> None:
        self._logger.log(self.level, "[%s] %s", self.label, self.fmt(value))

    def bind(self, state: ObservableState, *, replay: bool = True) -> Unsubscribe:
        return state.subscribe(self, replay=replay)


def format_entry(entry: EventLogEntry) -> str:
    return f"{format_timestamp(entry.timestamp_ms)} - {entry.label}"


def format_event_log(entries: Tuple[EventLogEntry, ...]) -> str:
    if not entries:
        return "No lifecycle events yet"
    lines = [f"Current State: {entries[0].label}"]
    lines += [f"{format_entry(e)} ({color_hex(e.color)})" for e in entries]
    return "\n".join(lines)


class TransitionNotifier:
    """
    Surfaces "Lifecycle event: <label>" for each new entry in an event log
    while the notifications switch is on.
    """
    def __init__(self, events: ObservableState[Tuple[EventLogEntry, ...]],
                 enabled: ObservableState[bool],
                 notify: Callable[[str], None]) -> None:
        self._enabled = enabled
        self._notify = notify
        self._last_seen = events.get()[0] if events.get() else None
        self._unsubscribe = events.subscribe(self.update)

    def update(self, entries: Tuple[EventLogEntry, ...]) -> None:
        newest = entries[0] if entries else None
        if newest is None or newest is self._last_seen:
            return
        self._last_seen = newest
        if self._enabled.get():
            self._notify(f"Lifecycle event: {newest.label}")

    def close(self) -> None:
        self._unsubscribe()
