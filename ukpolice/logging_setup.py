# ukpolice/logging_setup.py
"""
Process-level logging for the CLI.

Library modules only call logging.getLogger(__name__) and attach request
context through `extra=` (endpoint, status, rate_remaining, and force/month
for CLI jobs). The formatters here surface that context; applications
embedding Client keep their own configuration instead.
"""
import json
import logging
import os
import socket
import sys
import time

from concurrent_log_handler import ConcurrentRotatingFileHandler

# record attributes set through extra= by the client and the CLI
CONTEXT_FIELDS = ("endpoint", "status", "rate_remaining", "force", "month")

_INSTALLED = "_ukpolice_handler"


def _context(record: logging.LogRecord) -> dict:
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if getattr(record, k, None) is not None}


# ---------- Formatters ----------
class JsonFormatter(logging.Formatter):
    """One JSON object per line: when, what, and the API call it concerns."""
    def __init__(self, *, static=None):
        super().__init__()
        self.static = static or {}

    def format(self, record: logging.LogRecord) -> str:
        doc = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "thread": record.threadName,
            **_context(record),
            **self.static,
        }
        if record.exc_info:
            doc["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(doc, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Single line for terminals; request context appended as key=value."""
    def __init__(self):
        super().__init__("%(asctime)s [%(threadName)-12.12s] %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ctx = _context(record)
        if ctx:
            line += " " + " ".join(f"{k}={v}" for k, v in ctx.items())
        return line


def _level(val) -> int:
    if isinstance(val, int):
        return val
    lvl = logging.getLevelName(str(val or "INFO").upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def remove_handlers(logger: logging.Logger | None = None) -> None:
    """Detach and close the handlers a previous setup_logging() installed."""
    logger = logger or logging.getLogger()
    for h in list(logger.handlers):
        if getattr(h, _INSTALLED, False):
            logger.removeHandler(h)
            h.close()


def setup_logging(
    *,
    app: str = "ukpolice",
    level: str | int | None = None,
    use_stream: bool = True,
    stream_json: bool = False,
    filename: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Text (or JSON) on stdout plus an optional JSON rotating file that
    several CLI processes may share. Safe to call again: only handlers from
    an earlier call are replaced.
    """
    lvl = _level(level)
    static = {"app": app, "host": socket.gethostname()}

    root = logging.getLogger()
    remove_handlers(root)
    root.setLevel(lvl)

    handlers = []
    if use_stream:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(JsonFormatter(static=static) if stream_json else TextFormatter())
        handlers.append(sh)

    if filename:
        d = os.path.dirname(filename)
        if d:
            os.makedirs(d, exist_ok=True)
        fh = ConcurrentRotatingFileHandler(filename=filename, maxBytes=max_bytes, backupCount=backup_count)
        fh.setFormatter(JsonFormatter(static=static))
        handlers.append(fh)

    for h in handlers:
        h.setLevel(lvl)
        setattr(h, _INSTALLED, True)
        root.addHandler(h)

    return root
