"""Redis readiness: every configured Redis instance answers PING.

One target per configuration file found in the config directory
(``resque.yml``, ``redis.*.yml``, ``cable.yml``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional

import redis
from redis.sentinel import Sentinel

from cng_tools.checks.models import Probe, ProbeTarget
from cng_tools.config import RedisConnectionSpec, load_redis_config
from cng_tools.exceptions import ConfigurationError
from cng_tools.logger import Logger, get_logger

REDIS_CONFIG_PATTERNS = ("resque.yml", "redis.*.yml", "cable.yml")
CONNECT_TIMEOUT = 5.0


def discover_redis_configs(config_directory: Path) -> List[Path]:
    """Matching files in pattern order, each listed once."""
    config_directory = Path(config_directory)
    found: List[Path] = []
    for pattern in REDIS_CONFIG_PATTERNS:
        for path in sorted(config_directory.glob(pattern)):
            if path.is_file() and path not in found:
                found.append(path)
    return found


def build_redis_client(spec: RedisConnectionSpec) -> Any:
    """Create a client for a direct or Sentinel-managed instance."""
    if spec.uses_sentinel:
        sentinel_kwargs = {"password": spec.sentinel_password} if spec.sentinel_password else None
        sentinel = Sentinel(
            list(spec.sentinels),
            sentinel_kwargs=sentinel_kwargs,
            socket_connect_timeout=CONNECT_TIMEOUT,
        )
        return sentinel.master_for(
            spec.master_name,
            db=spec.db,
            username=spec.username,
            password=spec.password,
        )

    if spec.unix_socket_path:
        return redis.Redis(
            unix_socket_path=spec.unix_socket_path,
            db=spec.db,
            username=spec.username,
            password=spec.password,
            socket_timeout=CONNECT_TIMEOUT,
        )

    return redis.Redis(
        host=spec.host,
        port=spec.port,
        db=spec.db,
        username=spec.username,
        password=spec.password,
        ssl=spec.ssl,
        socket_connect_timeout=CONNECT_TIMEOUT,
    )


class RedisProbe(Probe):
    """Ping every Redis instance referenced by the config directory."""

    kind = "Redis"

    def __init__(
        self,
        config_directory: Path,
        env_name: str = "production",
        client_factory: Callable[[RedisConnectionSpec], Any] = build_redis_client,
        logger: Optional[Logger] = None,
    ):
        self.config_directory = Path(config_directory)
        self.env_name = env_name
        self._client_factory = client_factory
        self.logger = logger or get_logger()

    def targets(self) -> List[ProbeTarget]:
        targets = []
        for path in discover_redis_configs(self.config_directory):
            try:
                spec: Optional[RedisConnectionSpec] = load_redis_config(path, self.env_name)
            except ConfigurationError as exc:
                self.logger.error(f"- FAILED reading {path.name}: {exc.message}")
                spec = None
            targets.append(ProbeTarget(path.name, spec))
        return targets

    def check(self, target: ProbeTarget) -> bool:
        spec: Optional[RedisConnectionSpec] = target.connection_spec
        if spec is None:
            return False

        if spec.uses_sentinel:
            through = ", ".join(f"{host}:{port}" for host, port in spec.sentinels)
        else:
            through = spec.unix_socket_path or spec.host
        client = self._client_factory(spec)
        try:
            client.ping()
        except (redis.RedisError, OSError) as exc:
            self.logger.error(
                f"- FAILED connecting to '{spec.url}' from {target.identifier}, through {through}",
                error=str(exc),
            )
            return False
        finally:
            client.close()

        self.logger.info(
            f"+ SUCCESS connecting to '{spec.url}' from {target.identifier}, through {through}"
        )
        return True
