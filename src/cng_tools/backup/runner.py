"""Blocking execution of external storage and archive commands."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from cng_tools.logger import Logger, get_logger


@dataclass
class CommandResult:
    """Combined stdout/stderr and exit status of one command."""

    command: List[str] = field(default_factory=list)
    output: str = ""
    return_code: int = 0

    @property
    def success(self) -> bool:
        return self.return_code == 0


class CommandRunner:
    """Run a command to completion, capturing everything it prints."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger()

    def run(self, command: Sequence[str]) -> CommandResult:
        command = list(command)
        self.logger.debug(f"$ {' '.join(command)}")
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as exc:
            # Missing executable; report like a shell would
            return CommandResult(command, str(exc), 127)
        return CommandResult(command, completed.stdout or "", completed.returncode)
