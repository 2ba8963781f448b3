from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_FUNCTION_NAME_ENV = "HOURLY_CHECK_FUNCTION_NAME"
_TABLE_NAME_ENV = "HOURLY_CHECK_TABLE_NAME"
_HTTP_TIMEOUT_ENV = "HTTP_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    function_name: str
    table_name: str
    http_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_http_timeout(default: float) -> float:
    value = os.getenv(_HTTP_TIMEOUT_ENV)
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


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    level = candidate.upper()
    return level if level in LOG_LEVELS else default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        function_name=_read_str_env(_FUNCTION_NAME_ENV, "update-hourly-details"),
        table_name=_read_str_env(_TABLE_NAME_ENV, "hourly_details"),
        http_timeout=_read_http_timeout(30.0),
        log_level=_read_log_level("INFO"),
    )
