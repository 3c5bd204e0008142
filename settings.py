from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_WINDOW_ENV = "STATS_WINDOW_SECONDS"
_AUTHORIZED_CITY_ENV = "AUTHORIZED_CITY"
_HOST_ENV = "SERVICE_HOST"
_PORT_ENV = "SERVICE_PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    window_seconds: float
    authorized_city: str
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_window_seconds(default: float) -> float:
    value = os.getenv(_WINDOW_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        window_seconds=_read_window_seconds(60.0),
        authorized_city=_read_str_env(_AUTHORIZED_CITY_ENV, "bangalore").lower(),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(8080),
        log_level=_read_log_level("INFO"),
    )
