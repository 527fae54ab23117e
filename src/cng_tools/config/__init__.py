"""Configuration Module for cng-tools

Example:
    from cng_tools.config import ProbeSettings, load_database_config

    settings = ProbeSettings.from_env()
    databases = load_database_config(settings.database_path)
"""

from cng_tools.config.connections import (
    DatabaseConnectionSpec,
    RedisConnectionSpec,
    load_database_config,
    load_redis_config,
    load_yaml,
)
from cng_tools.config.env_loader import EnvLoader, read_flag, read_int
from cng_tools.config.settings import LogSettings, ProbeSettings

__all__ = [
    "EnvLoader",
    "read_int",
    "read_flag",
    "ProbeSettings",
    "LogSettings",
    "DatabaseConnectionSpec",
    "RedisConnectionSpec",
    "load_database_config",
    "load_redis_config",
    "load_yaml",
]
