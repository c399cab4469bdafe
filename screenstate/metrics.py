# screenstate/metrics.py
from __future__ import annotations
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, REGISTRY,
)

# Periodic task metrics
TICKS_TOTAL = Counter(
    "screenstate_ticks_total",
    "Timer ticks handled by periodic task controllers",
    ["task", "outcome"]  # ok|error|dropped
)

TICK_LATENCY_SECONDS = Histogram(
    "screenstate_tick_latency_seconds",
    "Time spent applying one tick's mutation",
    ["task"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

TIMER_ACTIVE = Gauge(
    "screenstate_timer_active",
    "1 while the task has an armed timer",
    ["task"]
)

# Observable state metrics
STATE_UPDATES_TOTAL = Counter(
    "screenstate_state_updates_total",
    "Values written to observable state",
    ["state"]
)

SUBSCRIBER_ERRORS_TOTAL = Counter(
    "screenstate_subscriber_errors_total",
    "Subscriber callbacks that raised during notification",
    ["state"]
)


def sample(name: str, **labels) -> float:
    """Current value of a sample in the default registry (0.0 when unset)."""
    return REGISTRY.get_sample_value(name, labels) or 0.0


def render_prometheus() -> bytes:
    return generate_latest(REGISTRY)
