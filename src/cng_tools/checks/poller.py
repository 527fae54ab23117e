"""Bounded readiness polling with concurrent per-target probes."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional

from cng_tools.checks.models import PollSession, Probe, ProbeTarget
from cng_tools.logger import Logger, get_logger


def probe_round(
    targets: Iterable[ProbeTarget],
    check: Callable[[ProbeTarget], bool],
    logger: Optional[Logger] = None,
) -> Dict[str, bool]:
    """Probe every target concurrently, one worker per target.

    Joins on all workers before returning. Each target's
    ``last_observed_state`` is updated with its outcome.

    Returns:
        Mapping of target identifier to outcome
    """
    targets = list(targets)
    if not targets:
        return {}

    def _guarded(target: ProbeTarget) -> bool:
        try:
            return bool(check(target))
        except Exception as exc:  # noqa: BLE001 - a probe must never break the round
            if logger is not None:
                logger.error(f"Error checking {target.identifier}: {exc}")
            return False

    with ThreadPoolExecutor(max_workers=len(targets)) as executor:
        outcomes = list(executor.map(_guarded, targets))

    results: Dict[str, bool] = {}
    for target, outcome in zip(targets, outcomes):
        target.last_observed_state = outcome
        results[target.identifier] = outcome
    return results


class ReadinessPoller:
    """Poll a probe until all its targets are healthy or attempts run out.

    Performs at most ``max_attempts`` rounds. Sleeps only between failed
    rounds, never after a successful one nor after the last attempt.

    Example:
        poller = ReadinessPoller(PostgreSQLProbe(databases, schema_version=42))
        ready = poller.run(PollSession(max_attempts=30, sleep_interval=1))
    """

    def __init__(
        self,
        probe: Probe,
        logger: Optional[Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.probe = probe
        self.logger = logger or get_logger()
        self._sleep = sleep
        self.rounds = 0

    def check_all(self, targets: List[ProbeTarget]) -> bool:
        """Run one round; succeeds iff there is at least one target and all pass."""
        self.logger.info(f"Checking: {', '.join(t.identifier for t in targets)}")
        if not targets:
            self.logger.warning(f"No {self.probe.kind} targets configured")
            return False
        results = probe_round(targets, self.probe.check, self.logger)
        return all(results.values())

    def run(self, session: PollSession) -> bool:
        """Poll until success or until ``session.max_attempts`` rounds failed.

        Targets are rebuilt from the probe at the start of every round, so a
        configuration file that appears or gets fixed between rounds is
        picked up. ``session.targets`` holds the targets of the latest round.
        """
        self.rounds = 0
        passed = False
        for attempt in range(1, session.max_attempts + 1):
            self.rounds = attempt
            session.targets = self.probe.targets()
            passed = self.check_all(session.targets)
            if passed:
                break
            if attempt < session.max_attempts:
                self.logger.debug(
                    f"{self.probe.kind} not ready, retrying in {session.sleep_interval}s",
                    attempt=attempt,
                )
                self._sleep(session.sleep_interval)

        if passed:
            self.logger.info(f"{self.probe.kind} ready after {self.rounds} attempt(s)")
        else:
            self.logger.error(f"{self.probe.kind} not ready after {self.rounds} attempt(s)")
        return passed


def run(
    probe: Probe,
    max_attempts: int,
    sleep_interval: float,
    logger: Optional[Logger] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Convenience wrapper: poll ``probe`` with a fresh session."""
    session = PollSession(max_attempts=max_attempts, sleep_interval=sleep_interval)
    return ReadinessPoller(probe, logger=logger, sleep=sleep).run(session)
