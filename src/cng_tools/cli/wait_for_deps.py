#!/usr/bin/env python3
"""Block until the services a container depends on are ready.

USAGE:
    wait-for-deps postgresql
    wait-for-deps redis

ENVIRONMENT VARIABLES:
    WAIT_FOR_TIMEOUT        Maximum number of attempts (default: 30)
    SLEEP_DURATION          Seconds between attempts (default: 1)
    CONFIG_DIRECTORY        Directory holding the YAML configuration
    DATABASE_FILE           Database YAML inside CONFIG_DIRECTORY (default: database.yml)
    SCHEMA_VERSION          Migration id the codebase expects
    BYPASS_SCHEMA_VERSION   Set to accept any readable schema version

Exit status is 0 when every target is ready, 1 otherwise.
"""

import argparse
import sys
from typing import List, Optional

from cng_tools.checks import PostgreSQLProbe, Probe, RedisProbe, run
from cng_tools.config import ProbeSettings, load_database_config
from cng_tools.exceptions import ConfigurationError
from cng_tools.logger import Logger, get_logger


def build_probe(dependency: str, settings: ProbeSettings, logger: Logger) -> Probe:
    if dependency == "postgresql":
        return PostgreSQLProbe(
            load_database_config(settings.database_path),
            schema_version=settings.schema_version,
            bypass_schema_version=settings.bypass_schema_version,
            logger=logger,
        )
    return RedisProbe(settings.config_directory, logger=logger)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="wait-for-deps",
        description="Wait for PostgreSQL or Redis to become ready",
    )
    parser.add_argument("dependency", choices=["postgresql", "redis"])
    args = parser.parse_args(argv)

    logger = get_logger()
    try:
        settings = ProbeSettings.from_env()
        probe = build_probe(args.dependency, settings, logger)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}", code=e.code, **e.details)
        return 1

    ready = run(probe, settings.wait_for_timeout, settings.sleep_duration, logger=logger)
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
