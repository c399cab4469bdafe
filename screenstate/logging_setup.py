import json, logging, os, sys, time, socket
from logging.handlers import RotatingFileHandler

try:
    from concurrent_log_handler import ConcurrentRotatingFileHandler
    HAS_CONCURRENT = True
except ImportError:
    HAS_CONCURRENT = False

# LogRecord attributes that are never copied into the JSON payload
_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


# ---------- Formatters ----------
class JsonFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields and static context are merged in."""
    def __init__(self, *, static_fields: dict | None = None):
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created)) + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "thread": record.threadName,
            "where": f"{record.filename}:{record.lineno}",
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_FIELDS or key in payload or key.startswith("_"):
                continue
            payload[key] = value

        payload.update(self.static_fields)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human format for terminals and log files."""
    def __init__(self):
        super().__init__("%(asctime)s [%(threadName)-12.12s] [%(levelname)-8.8s] "
                         "[%(name)s] %(message)s")


# ---------- Utilities ----------
def _ensure_dir(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


def _parse_level(val: str | int | None, default: str = "INFO") -> int:
    if isinstance(val, int):
        return val
    name = (val or os.getenv("LOG_LEVEL", default)).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _file_handler(filename: str, max_bytes: int, backup_count: int, use_concurrent: bool) -> logging.Handler:
    _ensure_dir(filename)
    if use_concurrent and HAS_CONCURRENT:
        return ConcurrentRotatingFileHandler(filename=filename, maxBytes=max_bytes, backupCount=backup_count)
    return RotatingFileHandler(filename=filename, maxBytes=max_bytes, backupCount=backup_count)


def setup_logging(
    *,
    app: str,
    level: str | int | None = None,
    # STDOUT handler
    use_stream: bool = True,
    stream_json: bool = True,
    # File handler
    filename: str | None = None,
    rolling_max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
    use_concurrent_file_handler: bool = True,
    file_json: bool = False,
    # Extra context
    static_fields: dict | None = None,
) -> logging.Logger:
    """
    Configure the root logger: stdout (JSON or text) + optional rotating file.
    Call once at process start; calling again replaces the handlers.
    """
    lvl = _parse_level(level)
    static_fields = {
        "app": app,
        "host": socket.gethostname(),
        **(static_fields or {}),
    }

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(lvl)

    if use_stream:
        sh = logging.StreamHandler(sys.stdout)
        sh.setLevel(lvl)
        sh.setFormatter(JsonFormatter(static_fields=static_fields) if stream_json else TextFormatter())
        root.addHandler(sh)

    if filename:
        fh = _file_handler(filename, rolling_max_bytes, backup_count, use_concurrent_file_handler)
        fh.setLevel(lvl)
        fh.setFormatter(JsonFormatter(static_fields=static_fields) if file_json else TextFormatter())
        root.addHandler(fh)

    return root


def setup_logging_from_settings(app: str, cfg) -> logging.Logger:
    """Wire `setup_logging` from a `Settings` instance."""
    return setup_logging(
        app=app,
        level=cfg.log_level,
        use_stream=True,
        stream_json=cfg.log_json,
        filename=cfg.log_file or None,
    )
