"""Centralized logging configuration for chime.

This module provides a single point of truth for logging setup.
Entry points (CLI) should call configure_logging() early; library users
configure logging however they like.

Logging Levels:
- DEBUG: Parse results, per-run start/finish
- INFO: Task registration, dispatch, driver lifecycle, heartbeats
- WARNING: Driver thread did not stop in time
- ERROR: Task bodies that raised, tasks that could not be evaluated

Events are logged as snake_case names with structured context passed via
``extra``, e.g. ``logger.info("task_dispatched", extra={"task.name": name})``.
"""

import json
import logging
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, TextIO

# Default retention period for log files
DEFAULT_LOG_RETENTION_DAYS = 7

LOG_LEVEL_ENV_VAR = "CHIME_LOG_LEVEL"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "component"}


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields passed to the logging call via ``extra``."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


def _component(name: str) -> str:
    parts = name.split(".")
    if len(parts) >= 2 and parts[0] == "chime":
        return parts[1]
    return parts[0]


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete ``*.jsonl`` files whose mtime is older than ``retention_days``.

    Returns the number of files removed. Files that vanish or cannot be
    removed are skipped.
    """
    if not logs_dir.is_dir():
        return 0

    cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).timestamp()
    removed = 0
    for path in logs_dir.glob(f"*{suffix}"):
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError:
            continue
    return removed


class JSONLHandler(logging.Handler):
    """Write one JSON object per record to ``<logs_dir>/YYYY-MM-DD.jsonl``.

    A new file is opened when the UTC date changes, and old files are pruned
    at that point. ``extra`` context is kept as a nested ``extra`` object.
    """

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self._logs_dir = logs_dir
        self._retention_days = retention_days
        self._day: str | None = None
        self._stream: TextIO | None = None

    def _stream_for(self, day: str) -> TextIO:
        if self._stream is None or day != self._day:
            if self._stream is not None:
                self._stream.close()
            self._stream = (self._logs_dir / f"{day}.jsonl").open("a", encoding="utf-8")
            self._day = day
            prune_old_logs(self._logs_dir, self._retention_days)
        return self._stream

    def _entry(self, record: logging.LogRecord) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "component": _component(record.name),
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = (self.formatter or logging.Formatter()).formatException(
                record.exc_info
            )
        if extra := record_extra(record):
            entry["extra"] = extra
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self._entry(record), default=str)
            with self.lock:
                stream = self._stream_for(datetime.now(UTC).strftime("%Y-%m-%d"))
                stream.write(line + "\n")
                stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        with self.lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Formatter exposing ``%(component)s`` and appending ``extra`` context.

    ``chime.scheduling.driver`` becomes ``scheduling``; foreign loggers keep
    their top-level package name. Extra fields are appended as ``key=value``.
    """

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        text = super().format(record)
        if extra := record_extra(record):
            text += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return text


def _resolve_level(level: str | None) -> int:
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").upper()
    if name not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        name = "INFO"
    return getattr(logging, name)


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(show_path=False, markup=False)
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
        return handler

    handler = logging.StreamHandler()
    handler.setFormatter(
        ComponentFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
) -> None:
    """Configure root logging for chime entry points.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Falls back to CHIME_LOG_LEVEL,
            then INFO. Unknown names are treated as INFO.
        use_rich: Render console output with rich.
        log_to_file: Also write JSONL files under ``$CHIME_HOME/logs``.
        retention_days: Days of JSONL files to keep.
    """
    from chime.config.paths import get_logs_path

    log_level = _resolve_level(level)
    handlers = [_console_handler(use_rich)]
    if log_to_file:
        handlers.append(JSONLHandler(get_logs_path(), retention_days=retention_days))

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
