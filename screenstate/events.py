from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class LifecycleEvent(str, Enum):
    ON_CREATE = "ON_CREATE"
    ON_START = "ON_START"
    ON_RESUME = "ON_RESUME"
    ON_PAUSE = "ON_PAUSE"
    ON_STOP = "ON_STOP"
    ON_DESTROY = "ON_DESTROY"
    ON_ANY = "ON_ANY"


# ARGB display colours per transition
GREEN = 0xFF4CAF50
BLUE = 0xFF2196F3
AMBER = 0xFFFFC107
RED = 0xFFF44336
GREY = 0xFF9E9E9E

EVENT_COLORS = {
    LifecycleEvent.ON_CREATE: GREEN,
    LifecycleEvent.ON_START: GREEN,
    LifecycleEvent.ON_RESUME: BLUE,
    LifecycleEvent.ON_PAUSE: AMBER,
    LifecycleEvent.ON_STOP: AMBER,
    LifecycleEvent.ON_DESTROY: RED,
}


def color_for(event: LifecycleEvent | str) -> int:
    try:
        return EVENT_COLORS.get(LifecycleEvent(event), GREY)
    except ValueError:
        return GREY


def label_for(event: LifecycleEvent | str) -> str:
    return event.value if isinstance(event, LifecycleEvent) else str(event)


def color_hex(argb: int) -> str:
    """0xFF4CAF50 -> '#4CAF50' (alpha dropped)."""
    return f"#{argb & 0xFFFFFF:06X}"


@dataclass(frozen=True)
class EventLogEntry:
    label: str
    timestamp_ms: int
    color: int = GREY


@dataclass(frozen=True)
class Reading:
    value: float
    timestamp_ms: int
