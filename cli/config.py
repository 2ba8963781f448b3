from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from errors import ConfigurationError
from settings import get_settings

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_TIMEOUT = 120.0

_BASE_URL_ENV = "SUPABASE_URL"
_API_KEY_ENV = "SUPABASE_ANON_KEY"
_POLL_INTERVAL_ENV = "HOURLY_CHECK_POLL_INTERVAL"
_TIMEOUT_ENV = "HOURLY_CHECK_POLL_TIMEOUT"


@dataclass(frozen=True)
class CheckConfig:
    base_url: str
    api_key: str = field(default="", repr=False)
    function_name: str = "update-hourly-details"
    table_name: str = "hourly_details"
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_TIMEOUT
    http_timeout: float = 30.0

    @property
    def function_url(self) -> str:
        return f"{self.base_url}/functions/v1/{self.function_name}"

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table_name}"


def _read_float(value: Optional[str], default: float) -> float:
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


def _read_required(name: str) -> str:
    value = os.getenv(name)
    return value.strip() if value else ""


def load_config(
    base_url: Optional[str] = None,
    poll_interval: Optional[float] = None,
    poll_timeout: Optional[float] = None,
) -> CheckConfig:
    """Build the run configuration, failing before any network activity."""
    url = base_url or _read_required(_BASE_URL_ENV)
    api_key = _read_required(_API_KEY_ENV)
    missing = [
        name
        for name, value in ((_BASE_URL_ENV, url), (_API_KEY_ENV, api_key))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Please set {' and '.join(missing)} environment variable"
            f"{'s' if len(missing) > 1 else ''}.",
            missing=missing,
        )

    if poll_interval is None:
        poll_interval = _read_float(os.getenv(_POLL_INTERVAL_ENV), DEFAULT_POLL_INTERVAL)
    if poll_timeout is None:
        poll_timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)

    settings = get_settings()
    return CheckConfig(
        base_url=url.rstrip("/"),
        api_key=api_key,
        function_name=settings.function_name,
        table_name=settings.table_name,
        poll_interval=poll_interval,
        poll_timeout=poll_timeout,
        http_timeout=settings.http_timeout,
    )
