"""JSON-lines app logging plus crash hooks for the desktop host."""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import config_root

_LOGGER_NAME = "ringframe"
LOG_FILE_NAME = "ringframe.log"
FAULT_FILE_NAME = "fault.log"

# Keys passed through ``extra=`` that end up as top-level JSON fields.
_EXTRA_FIELDS = ("event", "crash_id", "exit_code", "render_ms", "canvas_size", "path")

_SESSION_ID = uuid.uuid4().hex[:12]


def log_dir(directory: Path | None = None) -> Path:
    path = directory or (config_root() / "logs")
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    """One JSON object per line, tagged with the process session id."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "session": _SESSION_ID,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(
    keep_files: int = 7,
    console: bool = True,
    directory: Path | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Attach the rotating file handler once; later calls return the same logger."""
    logger = logging.getLogger(_LOGGER_NAME)
    if any(getattr(h, "_ringframe", False) for h in logger.handlers):
        return logger

    logger.setLevel(level)
    logger.propagate = False

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir(directory) / LOG_FILE_NAME),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())
    file_handler._ringframe = True  # type: ignore[attr-defined]
    logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        stream_handler._ringframe = True  # type: ignore[attr-defined]
        logger.addHandler(stream_handler)

    logger.info(f"logging to {file_handler.baseFilename}", extra={"event": "logging_configured"})
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def _report_crash(kind: str, exc_info) -> str:
    crash_id = uuid.uuid4().hex
    get_logger().critical(
        f"{kind} crash_id={crash_id}",
        exc_info=exc_info,
        extra={"event": kind, "crash_id": crash_id},
    )
    return crash_id


def install_crash_hooks(directory: Path | None = None) -> None:
    """Route uncaught exceptions into the log and dump native faults beside it."""

    def _excepthook(exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        _report_crash("uncaught_exception", (exc_type, exc_value, exc_tb))

    def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
        _report_crash("thread_exception", (args.exc_type, args.exc_value, args.exc_traceback))

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook

    fault_file = (log_dir(directory) / FAULT_FILE_NAME).open("a", encoding="utf-8")
    faulthandler.enable(file=fault_file, all_threads=True)
    get_logger().info("crash hooks installed", extra={"event": "crash_hooks_installed"})
