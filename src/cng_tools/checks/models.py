"""Data types shared by the readiness probes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

from cng_tools.exceptions import ValidationError


@dataclass
class ProbeTarget:
    """One dependency endpoint to check.

    Attributes:
        identifier: Shard name, or config file name for Redis
        connection_spec: Backend-specific connection parameters
        last_observed_state: Outcome of the most recent probe, None before the first
    """

    identifier: str
    connection_spec: Any = None
    last_observed_state: Optional[bool] = None


@dataclass
class PollSession:
    """Bounds of one readiness check invocation."""

    max_attempts: int
    sleep_interval: float
    targets: List[ProbeTarget] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValidationError(
                "INVALID_MAX_ATTEMPTS", f"max_attempts must be >= 1, got {self.max_attempts}"
            )
        if self.sleep_interval < 0:
            raise ValidationError(
                "INVALID_SLEEP_INTERVAL", f"sleep_interval must be >= 0, got {self.sleep_interval}"
            )


class Probe(ABC):
    """A kind of dependency the poller can wait for."""

    #: Human-readable dependency kind, used in log lines
    kind: str = "dependency"

    @abstractmethod
    def targets(self) -> List[ProbeTarget]:
        """Build the targets to check from the probe's configuration."""

    @abstractmethod
    def check(self, target: ProbeTarget) -> bool:
        """Probe a single target.

        Implementations report problems by returning False; anything they
        raise is still converted to a failed result by the poller.
        """
