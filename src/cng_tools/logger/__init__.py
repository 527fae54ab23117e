"""
cng-tools logging.

Every command logs through ``get_logger()``; probes and the archiver accept an
injected ``Logger`` so tests can record lines instead of printing them.

Usage:
    from cng_tools.logger import get_logger

    logger = get_logger()
    logger.info("Checking: main, ci")

Environment Variables ({PREFIX} derived from the logger name, CNG_TOOLS for "cng-tools"):
    {PREFIX}_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    {PREFIX}_LOG_FILE: Optional file path for a copy of the output
    {PREFIX}_LOG_JSON: "true" for JSON lines
"""

from typing import Optional

from cng_tools.config.settings import LogSettings

from .interface import Logger
from .structured_logger import JsonFormatter, StructuredLogger, TextFormatter


def _get_env_prefix(name: str) -> str:
    return name.upper().replace("-", "_")


def create_logger(
    name: str = "cng-tools",
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> Logger:
    """Create a StructuredLogger; arguments left as None come from the environment."""
    settings = LogSettings.from_env(_get_env_prefix(name))
    return StructuredLogger(
        name=name,
        level=settings.level if level is None else level,
        log_file=settings.log_file if log_file is None else log_file,
        json_format=settings.json_format if json_format is None else json_format,
    )


def get_logger(name: str = "cng-tools") -> Logger:
    return create_logger(name=name)


__all__ = [
    "Logger",
    "StructuredLogger",
    "JsonFormatter",
    "TextFormatter",
    "create_logger",
    "get_logger",
]
