"""cng-tools - pipeline helpers for cloud native GitLab images.

- checks: wait for PostgreSQL shards and Redis instances to become ready
- backup: back up and restore object storage buckets through tar archives
- config: environment and YAML configuration loading
- logger: structured logging shared by every command
- exceptions: error classes with structured error info
"""

__version__ = "1.0.0"

from cng_tools.logger import (
    Logger,
    StructuredLogger,
    get_logger,
    create_logger,
)

from cng_tools.exceptions import (
    CngToolsError,
    ValidationError,
    ConfigurationError,
    BackupAbortError,
)

__all__ = [
    "__version__",
    # Logger
    "Logger",
    "StructuredLogger",
    "get_logger",
    "create_logger",
    # Exceptions
    "CngToolsError",
    "ValidationError",
    "ConfigurationError",
    "BackupAbortError",
]
