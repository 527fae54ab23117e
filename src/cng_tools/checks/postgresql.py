"""PostgreSQL readiness: every writable shard reachable and migrated.

Usage:
    databases = load_database_config(settings.database_path)
    probe = PostgreSQLProbe(databases, schema_version=settings.schema_version)
    ready = poller.run(probe, settings.wait_for_timeout, settings.sleep_duration)
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Tuple

import psycopg2
import psycopg2.errors

from cng_tools.checks.models import Probe, ProbeTarget
from cng_tools.config import DatabaseConnectionSpec
from cng_tools.logger import Logger, get_logger

# Rails stores migration ids as strings in schema_migrations
SCHEMA_VERSION_QUERY = "SELECT MAX(version::bigint) FROM schema_migrations"


class PostgreSQLProbe(Probe):
    """Check that each shard's schema is at least the codebase's version.

    A shard passes when its migrations table could be read and either the
    current version is >= ``schema_version`` or ``bypass_schema_version``
    is set. A database without a migrations table reads as version 0.
    """

    kind = "PostgreSQL"

    def __init__(
        self,
        databases: Mapping[str, DatabaseConnectionSpec],
        schema_version: int,
        bypass_schema_version: bool = False,
        connect: Callable[..., Any] = psycopg2.connect,
        logger: Optional[Logger] = None,
    ):
        self.databases = dict(databases)
        self.schema_version = schema_version
        self.bypass_schema_version = bypass_schema_version
        self._connect = connect
        self.logger = logger or get_logger()

    def targets(self) -> List[ProbeTarget]:
        return [ProbeTarget(name, spec) for name, spec in self.databases.items()]

    def read_schema_version(self, target: ProbeTarget) -> Tuple[bool, int]:
        """Return (read succeeded, latest applied migration id)."""
        spec: DatabaseConnectionSpec = target.connection_spec
        try:
            conn = self._connect(**spec.connect_kwargs())
        except psycopg2.Error as exc:
            self.logger.warning(
                f"WARNING: Problem accessing {target.identifier} database ({spec.database}). "
                "Confirm username, password, and permissions.",
                error=str(exc).strip(),
            )
            return False, 0

        try:
            with conn.cursor() as cursor:
                try:
                    cursor.execute(SCHEMA_VERSION_QUERY)
                except psycopg2.errors.UndefinedTable:
                    return True, 0
                row = cursor.fetchone()
            return True, int(row[0]) if row and row[0] is not None else 0
        except psycopg2.Error as exc:
            self.logger.error(f"Error fetching {target.identifier} schema: {exc}")
            return False, 0
        finally:
            conn.close()

    def check(self, target: ProbeTarget) -> bool:
        spec: DatabaseConnectionSpec = target.connection_spec
        success, current = self.read_schema_version(target)

        self.logger.info(
            f"Database Schema - {target.identifier} ({spec.database}) - "
            f"current: {current}, codebase: {self.schema_version}"
        )
        if current <= 0:
            self.logger.info("NOTICE: Database has not been initialized yet.")

        if self.bypass_schema_version and success:
            return True
        return success and current >= self.schema_version
