"""
Structured logger with JSON output and file support.

Writes to stdout so that CI pipelines capture probe and archiver diagnostics
alongside the output of the storage tools being driven.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .interface import Logger

# LogRecord attributes that are never treated as extra fields
_RECORD_KEYS = frozenset({
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module",
    "msecs", "message", "msg", "name", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "thread",
    "threadName", "taskName",
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_KEYS and key != "session_id"
    }


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "session_id": getattr(record, "session_id", None),
            "message": record.getMessage(),
        }
        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends extra kwargs as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = " ".join(f"{k}={v}" for k, v in _extra_fields(record).items())
        return f"{line} {extras}" if extras else line


class StructuredLogger(Logger):
    """Logger on top of the standard logging module.

    One handler writes to stdout; ``log_file`` adds a second one sharing the
    same formatter. Every line carries an 8-character session id so that the
    output of concurrent probe threads can be told apart from other runs.

    Example:
        logger = StructuredLogger(name="cng-tools", json_format=True)
        logger.info("Dumping uploads ...", bucket="gitlab-uploads")
    """

    TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [session:%(session_id)s] %(message)s"

    def __init__(
        self,
        name: str = "cng-tools",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
    ):
        self._session_id = uuid.uuid4().hex[:8]
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False
        # A second StructuredLogger with the same name replaces the first one's handlers
        self._logger.handlers.clear()

        formatter: logging.Formatter = (
            JsonFormatter() if json_format else TextFormatter(self.TEXT_FORMAT)
        )
        for handler in self._build_handlers(log_file):
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @staticmethod
    def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file:
            try:
                handlers.append(logging.FileHandler(log_file))
            except OSError as e:
                print(f"Failed to setup log file {log_file}: {e}", file=sys.stderr)
        return handlers

    def get_session_id(self) -> str:
        return self._session_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        # Reserved LogRecord names would make logging raise; keep them prefixed
        extra = {f"_{k}" if k in _RECORD_KEYS else k: v for k, v in kwargs.items()}
        extra["session_id"] = self._session_id
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)
