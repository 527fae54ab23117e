"""Common exceptions for cng-tools.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from cng_tools.exceptions import (
        CngToolsError,
        ValidationError,
        ConfigurationError,
        BackupAbortError,
    )
"""

from cng_tools.exceptions.base import (
    BackupAbortError,
    CngToolsError,
    ConfigurationError,
    ValidationError,
)

__all__ = [
    "CngToolsError",
    "ValidationError",
    "ConfigurationError",
    "BackupAbortError",
]
