"""Dataclass-based settings for the readiness checks and logging.

Probe variables are the ones the container entrypoints already export:

    WAIT_FOR_TIMEOUT        maximum number of probing rounds
    SLEEP_DURATION          seconds to sleep between failed rounds
    CONFIG_DIRECTORY        directory holding database.yml / resque.yml / ...
    DATABASE_FILE           database YAML file name inside CONFIG_DIRECTORY
    SCHEMA_VERSION          migration id the codebase expects
    BYPASS_SCHEMA_VERSION   any non-empty value accepts an older schema
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from cng_tools.config.env_loader import EnvLoader, read_flag, read_int
from cng_tools.exceptions import ConfigurationError

DEFAULT_WAIT_FOR_TIMEOUT = 30
DEFAULT_SLEEP_DURATION = 1
DEFAULT_CONFIG_DIRECTORY = "/srv/gitlab/config"
DEFAULT_DATABASE_FILE = "database.yml"


@dataclass
class ProbeSettings:
    """Readiness probe configuration

    Attributes:
        wait_for_timeout: Maximum number of probing rounds (>= 1)
        sleep_duration: Seconds between failed rounds
        config_directory: Directory containing the YAML configuration files
        database_file: Database YAML file name, relative to config_directory
        schema_version: Target schema migration identifier
        bypass_schema_version: Accept any readable schema version
    """

    wait_for_timeout: int = DEFAULT_WAIT_FOR_TIMEOUT
    sleep_duration: int = DEFAULT_SLEEP_DURATION
    config_directory: Path = Path(DEFAULT_CONFIG_DIRECTORY)
    database_file: str = DEFAULT_DATABASE_FILE
    schema_version: int = 0
    bypass_schema_version: bool = False

    def __post_init__(self):
        self.config_directory = Path(self.config_directory)
        if self.wait_for_timeout < 1:
            raise ConfigurationError(
                "OUT_OF_RANGE", f"wait_for_timeout must be >= 1, got {self.wait_for_timeout}"
            )

    @property
    def database_path(self) -> Path:
        """Full path of the database YAML file"""
        return self.config_directory / self.database_file

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> "ProbeSettings":
        """Load probe settings from environment variables

        Args:
            env: Explicit mapping to read instead of the process environment
            env_file: Optional .env file consulted before os.environ
        """
        if env is None:
            env = EnvLoader(env_file).load()

        return cls(
            wait_for_timeout=read_int(env, "WAIT_FOR_TIMEOUT", DEFAULT_WAIT_FOR_TIMEOUT, 1),
            sleep_duration=read_int(env, "SLEEP_DURATION", DEFAULT_SLEEP_DURATION, 0),
            config_directory=Path(env.get("CONFIG_DIRECTORY") or DEFAULT_CONFIG_DIRECTORY),
            database_file=env.get("DATABASE_FILE") or DEFAULT_DATABASE_FILE,
            schema_version=read_int(env, "SCHEMA_VERSION", 0, 0),
            bypass_schema_version=read_flag(env, "BYPASS_SCHEMA_VERSION"),
        )


@dataclass
class LogSettings:
    """Logging configuration

    Attributes:
        level: Numeric logging level
        log_file: Optional file receiving a copy of every line
        json_format: Emit one JSON object per line instead of text
    """

    level: int = logging.INFO
    log_file: Optional[str] = None
    json_format: bool = False

    @classmethod
    def from_env(
        cls, prefix: str = "CNG_TOOLS", env: Optional[Mapping[str, str]] = None
    ) -> "LogSettings":
        """Load logging settings from environment variables

        Environment variables:
            {prefix}_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
            {prefix}_LOG_FILE: Log file path
            {prefix}_LOG_JSON: "true" for JSON output
        """
        env = os.environ if env is None else env
        level = logging.getLevelName(env.get(f"{prefix}_LOG_LEVEL", "INFO").upper())
        return cls(
            level=level if isinstance(level, int) else logging.INFO,
            log_file=env.get(f"{prefix}_LOG_FILE") or None,
            json_format=env.get(f"{prefix}_LOG_JSON", "false").lower() == "true",
        )
