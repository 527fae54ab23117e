"""Connection specs parsed from the Rails-style YAML configuration files.

Both loaders read a single environment section (``production`` by default)
and are meant to be called once by the entry point; the resulting specs are
handed to the probes explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlparse

import yaml

from cng_tools.exceptions import ConfigurationError

POSTGRES_ADAPTERS = ("postgresql", "postgis")
DEFAULT_POSTGRES_PORT = 5432
DEFAULT_REDIS_PORT = 6379
DEFAULT_SENTINEL_PORT = 26379


def load_yaml(path: Path) -> Dict[str, Any]:
    """Parse a YAML mapping, raising ConfigurationError on any problem."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError("CONFIG_NOT_FOUND", f"{path} not found") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError("CONFIG_UNREADABLE", f"Unable to parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("CONFIG_INVALID", f"{path} does not contain a mapping")
    return data


def _environment_section(data: Dict[str, Any], env_name: str, path: Path) -> Dict[str, Any]:
    section = data.get(env_name)
    if not isinstance(section, dict):
        raise ConfigurationError(
            "CONFIG_SECTION_MISSING",
            f"{path} has no '{env_name}' section",
            {"path": str(path), "environment": env_name},
        )
    return section


@dataclass(frozen=True)
class DatabaseConnectionSpec:
    """Connection parameters of one PostgreSQL shard."""

    database: str
    host: Optional[str] = None
    port: int = DEFAULT_POSTGRES_PORT
    username: Optional[str] = None
    password: Optional[str] = None
    sslmode: Optional[str] = None
    connect_timeout: Optional[int] = None

    def connect_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``psycopg2.connect``."""
        kwargs: Dict[str, Any] = {
            "dbname": self.database,
            "host": self.host,
            "port": self.port,
            "user": self.username,
            "password": self.password,
            "sslmode": self.sslmode,
            "connect_timeout": self.connect_timeout,
        }
        return {key: value for key, value in kwargs.items() if value is not None}


def _database_spec(name: str, entry: Dict[str, Any], path: Path) -> DatabaseConnectionSpec:
    database = entry.get("database")
    if not database:
        raise ConfigurationError(
            "CONFIG_INVALID", f"Database '{name}' in {path} has no database name"
        )
    try:
        port = int(entry.get("port") or DEFAULT_POSTGRES_PORT)
        timeout = entry.get("connect_timeout")
        connect_timeout = int(timeout) if timeout is not None else None
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            "CONFIG_INVALID", f"Database '{name}' in {path} has a non-numeric port or timeout"
        ) from exc

    return DatabaseConnectionSpec(
        database=str(database),
        host=entry.get("host"),
        port=port,
        username=entry.get("username"),
        password=None if entry.get("password") is None else str(entry["password"]),
        sslmode=entry.get("sslmode"),
        connect_timeout=connect_timeout,
    )


def load_database_config(
    path: Path, env_name: str = "production"
) -> Dict[str, DatabaseConnectionSpec]:
    """Load the writable PostgreSQL databases of one environment.

    Accepts the multi-database layout (``production: {main: {...}, ci: {...}}``)
    and the single-database layout, which is reported as shard ``main``.
    Replicas and non-PostgreSQL adapters are skipped.

    Returns:
        Mapping of shard name to connection spec, in file order
    """
    path = Path(path)
    section = _environment_section(load_yaml(path), env_name, path)

    if "database" in section or "adapter" in section:
        entries = {"main": section}
    else:
        entries = {name: entry for name, entry in section.items() if isinstance(entry, dict)}

    databases: Dict[str, DatabaseConnectionSpec] = {}
    for name, entry in entries.items():
        if entry.get("replica"):
            continue
        if str(entry.get("adapter", "postgresql")) not in POSTGRES_ADAPTERS:
            continue
        databases[name] = _database_spec(name, entry, path)

    if not databases:
        raise ConfigurationError(
            "CONFIG_INVALID", f"{path} defines no PostgreSQL database for '{env_name}'"
        )
    return databases


@dataclass(frozen=True)
class RedisConnectionSpec:
    """Connection parameters of one Redis instance (direct or via Sentinel)."""

    host: str = "localhost"
    port: int = DEFAULT_REDIS_PORT
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = None
    ssl: bool = False
    sentinels: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)
    sentinel_password: Optional[str] = None
    unix_socket_path: Optional[str] = None

    @property
    def scheme(self) -> str:
        if self.unix_socket_path:
            return "unix"
        return "rediss" if self.ssl else "redis"

    @property
    def url(self) -> str:
        """Credential-free URL used in diagnostics."""
        if self.unix_socket_path:
            return f"unix://{self.unix_socket_path}"
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def uses_sentinel(self) -> bool:
        return bool(self.sentinels)

    @property
    def master_name(self) -> str:
        """Sentinel deployments put the master group name in the URL host."""
        return self.host


def _parse_sentinels(raw: Any, path: Path) -> List[Tuple[str, int]]:
    if not raw:
        return []
    if not isinstance(raw, list):
        raise ConfigurationError("CONFIG_INVALID", f"'sentinels' in {path} must be a list")
    sentinels = []
    for item in raw:
        if not isinstance(item, dict) or "host" not in item:
            raise ConfigurationError("CONFIG_INVALID", f"Invalid sentinel entry in {path}: {item!r}")
        sentinels.append((str(item["host"]), int(item.get("port") or DEFAULT_SENTINEL_PORT)))
    return sentinels


def load_redis_config(path: Path, env_name: str = "production") -> RedisConnectionSpec:
    """Load the Redis connection parameters of one environment from a
    ``resque.yml``-style file.

    ``url`` takes precedence over ``host``/``port``/``db``/``password``
    for the parts it specifies. A ``unix:///path/to/redis.sock`` URL (or a
    ``path`` key) selects a Unix domain socket; its database comes from the
    ``db`` query parameter or key.
    """
    path = Path(path)
    section = _environment_section(load_yaml(path), env_name, path)

    host = section.get("host") or "localhost"
    port = section.get("port") or DEFAULT_REDIS_PORT
    db = section.get("db") or 0
    username = section.get("username")
    password = section.get("password")
    ssl = bool(section.get("ssl", False))
    socket_path = section.get("path")

    url = section.get("url")
    if url:
        parsed = urlparse(str(url))
        if parsed.scheme not in ("redis", "rediss", "unix"):
            raise ConfigurationError("CONFIG_INVALID", f"Unsupported Redis URL scheme in {path}")
        ssl = ssl or parsed.scheme == "rediss"
        host = parsed.hostname or host
        port = parsed.port or port
        if parsed.username:
            username = unquote(parsed.username)
        if parsed.password:
            password = unquote(parsed.password)
        if parsed.scheme == "unix":
            if not parsed.path:
                raise ConfigurationError(
                    "CONFIG_INVALID", f"Redis unix URL in {path} has no socket path"
                )
            socket_path = unquote(parsed.path)
            db = parse_qs(parsed.query).get("db", [db])[0]
        else:
            socket_path = None
            path_db = parsed.path.lstrip("/")
            if path_db:
                db = path_db

    try:
        return RedisConnectionSpec(
            host=str(host),
            port=int(port),
            db=int(db),
            username=username,
            password=None if password is None else str(password),
            ssl=ssl,
            sentinels=tuple(_parse_sentinels(section.get("sentinels"), path)),
            sentinel_password=section.get("sentinel_password"),
            unix_socket_path=None if socket_path is None else str(socket_path),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("CONFIG_INVALID", f"Invalid Redis settings in {path}: {exc}") from exc
