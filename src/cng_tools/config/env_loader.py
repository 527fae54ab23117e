"""Environment variable loading for the container entry points.

Values are merged in this order, later sources winning:
1) ``.env`` file (explicit path, or ``./.env`` when present)
2) process environment
3) explicit overrides

``read_int`` and ``read_flag`` interpret the merged strings the way the
entrypoint scripts always have: blank means unset, and a flag is on when it
holds any non-empty value.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from cng_tools.exceptions import ConfigurationError


class EnvLoader:
    """Merge ``.env`` values, os.environ and overrides into one mapping."""

    def __init__(self, env_file: Optional[Path | str] = None) -> None:
        self.env_file = Path(env_file) if env_file else None

    @property
    def env_path(self) -> Path:
        return self.env_file or Path.cwd() / ".env"

    def load(self, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        data: Dict[str, str] = {}

        if self.env_path.is_file():
            data.update(
                {k: v for k, v in dotenv_values(self.env_path).items() if v is not None}
            )

        data.update(os.environ)

        if overrides:
            data.update({k: str(v) for k, v in overrides.items()})

        return data


def read_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    """Integer variable; blank or unset gives ``default``.

    Raises:
        ConfigurationError: INVALID_INTEGER or OUT_OF_RANGE
    """
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            "INVALID_INTEGER", f"{name} must be an integer, got {raw!r}", {"variable": name}
        ) from exc
    if value < minimum:
        raise ConfigurationError(
            "OUT_OF_RANGE", f"{name} must be >= {minimum}, got {value}", {"variable": name}
        )
    return value


def read_flag(env: Mapping[str, str], name: str) -> bool:
    return bool(env.get(name))


__all__ = ["EnvLoader", "read_int", "read_flag"]
