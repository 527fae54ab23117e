"""Readiness checks for the services a container depends on.

Usage:
    from cng_tools.checks import PostgreSQLProbe, run

    ready = run(PostgreSQLProbe(databases, schema_version=42), max_attempts=30, sleep_interval=1)
"""

from cng_tools.checks.models import PollSession, Probe, ProbeTarget
from cng_tools.checks.poller import ReadinessPoller, probe_round, run
from cng_tools.checks.postgresql import PostgreSQLProbe
from cng_tools.checks.redis import RedisProbe, build_redis_client, discover_redis_configs

__all__ = [
    "Probe",
    "ProbeTarget",
    "PollSession",
    "ReadinessPoller",
    "probe_round",
    "run",
    "PostgreSQLProbe",
    "RedisProbe",
    "build_redis_client",
    "discover_redis_configs",
]
