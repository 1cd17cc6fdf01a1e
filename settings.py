from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_INFLUX_URL_ENV = "INFLUX_URL"
_SENSOR_TOKEN_ENV = "INFLUX_SENSOR_TOKEN"
_ALERTS_TOKEN_ENV = "INFLUX_ALERTS_TOKEN"
_SENSOR_DB_ENV = "INFLUX_SENSOR_DB"
_ALERTS_DB_ENV = "INFLUX_ALERTS_DB"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    influx_url: str
    sensor_token: Optional[str]
    alerts_token: Optional[str]
    sensor_database: str
    alerts_database: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


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
        influx_url=_read_str_env(_INFLUX_URL_ENV, "http://localhost:8181").rstrip("/"),
        sensor_token=_read_optional_env(_SENSOR_TOKEN_ENV, None),
        alerts_token=_read_optional_env(_ALERTS_TOKEN_ENV, None),
        sensor_database=_read_str_env(_SENSOR_DB_ENV, "mesh_sensors"),
        alerts_database=_read_str_env(_ALERTS_DB_ENV, "mesh_alerts"),
        log_level=_read_log_level("INFO"),
    )
