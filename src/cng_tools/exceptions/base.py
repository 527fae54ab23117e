"""Exceptions raised by the probes, loaders and the archiver.

Each carries a stable ``code`` for callers that branch on the failure, a
``message`` for operators, and a ``details`` mapping with the offending
variable, file or bucket.
"""

from typing import Any, Dict, Optional


class CngToolsError(Exception):
    """Base exception for all cng-tools errors.

    Attributes:
        code: Stable identifier, e.g. "CONFIG_NOT_FOUND" or "BACKUP_ABORTED"
        message: Operator-facing description
        details: Context such as the variable, path or bucket involved
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        return f"{text} (details: {self.details})" if self.details else text

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict form for JSON serialization."""
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


class ValidationError(CngToolsError):
    """Raised when constructor or input values fail validation."""

    pass


class ConfigurationError(CngToolsError):
    """Raised when environment or YAML configuration is invalid or missing."""

    pass


class BackupAbortError(CngToolsError):
    """Fatal abort of a bucket backup or restore.

    Storage sync operations are not safely retryable, so the first failing
    command ends the whole run. ``output`` holds whatever the failing command
    printed; ``str(error)`` is the ``"<action> of <name> failed"`` label.
    """

    def __init__(self, action: str, name: str, output: str = ""):
        super().__init__(
            code="BACKUP_ABORTED",
            message=f"{action} of {name} failed",
            details={"action": action, "name": name},
        )
        self.action = action
        self.name = name
        self.output = output

    def __str__(self) -> str:
        return self.message
