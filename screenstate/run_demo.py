import argparse
import logging
import time

from .config import settings
from .counter import CounterScreen
from .dashboard import DashboardScreen, TemperatureSource, summarize
from .events import LifecycleEvent
from .lifecycle import LifecycleScreen
from .logging_setup import setup_logging_from_settings
from .observers import LogRenderer, TransitionNotifier, format_event_log
from .timers import APSchedulerBackend

SCREENS = ("counter", "dashboard", "lifecycle")


def build_screen(kind: str, backend, cfg=settings):
    if kind == "counter":
        screen = CounterScreen(
            backend,
            interval_seconds=cfg.counter_interval_seconds,
            autostart=cfg.counter_autostart,
            overflow=cfg.counter_overflow,
        )
        screen.on_destroy(LogRenderer("counter").bind(screen.count))
        screen.on_destroy(LogRenderer("counter.auto").bind(screen.auto.running))
        return screen

    if kind == "dashboard":
        screen = DashboardScreen(
            backend,
            period_seconds=cfg.dashboard_period_seconds,
            window=cfg.dashboard_window,
            autostart=cfg.dashboard_autostart,
            source=TemperatureSource(cfg.temperature_min, cfg.temperature_max),
        )
        screen.on_destroy(LogRenderer("dashboard", fmt=lambda rs: str(summarize(rs))).bind(screen.readings))
        return screen

    if kind == "lifecycle":
        screen = LifecycleScreen(
            max_entries=cfg.event_log_cap,
            notifications_enabled=cfg.notifications_enabled,
        )
        notifier = TransitionNotifier(
            screen.events, screen.notifications,
            notify=lambda msg: logging.info("[snackbar] %s", msg),
        )
        screen.on_destroy(notifier.close)
        screen.on_destroy(LogRenderer("lifecycle", fmt=format_event_log, level=logging.DEBUG).bind(screen.events))
        return screen

    raise ValueError(f"unknown screen {kind!r}, expected one of {SCREENS}")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Run one demo screen headless, logging its state.")
    parser.add_argument("screen", choices=SCREENS)
    parser.add_argument("--seconds", type=float, default=0, help="stop after N seconds (0 = until Ctrl-C)")
    args = parser.parse_args(argv)

    setup_logging_from_settings("screenstate", settings)
    logging.info("[demo] starting %s screen", args.screen)

    backend = APSchedulerBackend()
    screen = build_screen(args.screen, backend)
    if args.screen == "lifecycle":
        for event in (LifecycleEvent.ON_CREATE, LifecycleEvent.ON_START, LifecycleEvent.ON_RESUME):
            screen.on_lifecycle_event(event)

    deadline = time.monotonic() + args.seconds if args.seconds > 0 else None
    try:
        while deadline is None or time.monotonic() < deadline:
            time.sleep(0.2)
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        if args.screen == "lifecycle":
            for event in (LifecycleEvent.ON_PAUSE, LifecycleEvent.ON_STOP, LifecycleEvent.ON_DESTROY):
                screen.on_lifecycle_event(event)
        screen.destroy()
        backend.shutdown()
        logging.info("[demo] done")


if __name__ == "__main__":
    main()
