from __future__ import annotations
from typing import Optional, Tuple, TypeVar

from .events import EventLogEntry, Reading
from .observable import ObservableState

T = TypeVar("T")


def prepend_capped(entries: Tuple[T, ...], entry: T, max_entries: Optional[int] = None) -> Tuple[T, ...]:
    """Newest first; beyond `max_entries` the oldest (last) entries fall off."""
    out = (entry,) + tuple(entries)
    if max_entries is not None and max_entries > 0:
        out = out[:max_entries]
    return out


def append_window(items: Tuple[T, ...], item: T, size: int) -> Tuple[T, ...]:
    """Fixed-capacity FIFO: append, then keep the most recent `size`."""
    if size < 1:
        raise ValueError("window size must be >= 1")
    out = tuple(items) + (item,)
    return out[-size:]


class EventLog(ObservableState[Tuple[EventLogEntry, ...]]):
    def __init__(self, max_entries: Optional[int] = None, *, name: str = "event_log") -> None:
        super().__init__((), name=name)
        self.max_entries = max_entries

    def append(self, entry: EventLogEntry) -> None:
        self.update(lambda cur: prepend_capped(cur, entry, self.max_entries))

    @property
    def latest(self) -> Optional[EventLogEntry]:
        entries = self.get()
        return entries[0] if entries else None

    def __len__(self) -> int:
        return len(self.get())


class ReadingWindow(ObservableState[Tuple[Reading, ...]]):
    def __init__(self, size: int = 20, *, name: str = "readings") -> None:
        if size < 1:
            raise ValueError("window size must be >= 1")
        super().__init__((), name=name)
        self.size = size

    def append(self, reading: Reading) -> None:
        self.update(lambda cur: append_window(cur, reading, self.size))

    @property
    def latest(self) -> Optional[Reading]:
        items = self.get()
        return items[-1] if items else None

    def values(self) -> list[float]:
        return [r.value for r in self.get()]

    def __len__(self) -> int:
        return len(self.get())
