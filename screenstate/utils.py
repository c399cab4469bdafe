import datetime as dt

MIN_PERIOD_SECONDS = 1


def clamp_period(seconds) -> int:
    """Whole seconds, never below one."""
    try:
        value = int(seconds)
    except (TypeError, ValueError, OverflowError):
        return MIN_PERIOD_SECONDS
    return max(value, MIN_PERIOD_SECONDS)


def parse_interval(text: str | None, fallback: int = MIN_PERIOD_SECONDS) -> int:
    """
    Parse free-text interval input from the settings screen.
    Anything that is not an integer falls back to `fallback`.
    """
    if text is None:
        return clamp_period(fallback)
    try:
        value = int(str(text).strip())
    except ValueError:
        return clamp_period(fallback)
    return clamp_period(value)


def now_ms() -> int:
    return int(dt.datetime.now(dt.timezone.utc).timestamp() * 1000)


def format_timestamp(ts_ms: int, tz: dt.tzinfo | None = None) -> str:
    """'HH:MM:SS.mmm' in local time (or `tz`)."""
    when = dt.datetime.fromtimestamp(ts_ms / 1000, tz=tz)
    return when.strftime("%H:%M:%S.") + f"{when.microsecond // 1000:03d}"
