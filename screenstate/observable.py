from __future__ import annotations
import logging
import threading
from typing import Callable, Generic, List, Tuple, TypeVar

from .metrics import STATE_UPDATES_TOTAL, SUBSCRIBER_ERRORS_TOTAL

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]

logger = logging.getLogger(__name__)


class ObservableState(Generic[T]):
    """
    Single value with synchronous change notification.

    The lock only covers the value swap and the subscriber snapshot;
    callbacks run outside it, so a subscriber may call back into
    `set` (nested notification) without deadlocking.
    """

    def __init__(self, initial: T, *, name: str = "state") -> None:
        self.name = name
        self._value = initial
        self._lock = threading.RLock()
        self._subscribers: List[Tuple[object, Subscriber]] = []

    @property
    def value(self) -> T:
        return self.get()

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, new_value: T) -> None:
        with self._lock:
            self._value = new_value
            subscribers = list(self._subscribers)
        STATE_UPDATES_TOTAL.labels(state=self.name).inc()
        self._notify(subscribers, new_value)

    def update(self, fn: Callable[[T], T]) -> T:
        """Apply `fn` to the current value and store the result."""
        with self._lock:
            new_value = fn(self._value)
            self._value = new_value
            subscribers = list(self._subscribers)
        STATE_UPDATES_TOTAL.labels(state=self.name).inc()
        self._notify(subscribers, new_value)
        return new_value

    def subscribe(self, callback: Subscriber, *, replay: bool = False) -> Unsubscribe:
        token = object()
        with self._lock:
            self._subscribers.append((token, callback))
            current = self._value

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers = [(t, cb) for t, cb in self._subscribers if t is not token]

        if replay:
            self._notify([(token, callback)], current)
        return unsubscribe

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _notify(self, subscribers: List[Tuple[object, Subscriber]], value: T) -> None:
        # fan out, but never let one subscriber starve the others
        for _, callback in subscribers:
            try:
                callback(value)
            except Exception:
                SUBSCRIBER_ERRORS_TOTAL.labels(state=self.name).inc()
                logger.exception("[%s] subscriber %r failed", self.name, callback)

    def __repr__(self) -> str:
        return f"ObservableState(name={self.name!r}, value={self.get()!r})"
