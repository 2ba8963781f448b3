"""Domain models shared by the client and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from errors import TriggerRejectedError

ACCEPTED_STATUS = 202
DEFAULT_ROW_LIMIT = 1000


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    rendered = ensure_utc(value).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def format_coordinate(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class RequestWindow:
    """Closed time range ``[start, end]`` the remote job is asked to process."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = ensure_utc(self.start)
        end = ensure_utc(self.end)
        if start >= end:
            raise ValueError(
                f"Window start {format_timestamp(start)} must be before end {format_timestamp(end)}."
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def trailing(cls, hours: float = 24, now: Optional[datetime] = None) -> "RequestWindow":
        if hours <= 0:
            raise ValueError("Window length in hours must be positive.")
        end = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        return cls(start=end - timedelta(hours=hours), end=end)

    @property
    def start_iso(self) -> str:
        return format_timestamp(self.start)

    @property
    def end_iso(self) -> str:
        return format_timestamp(self.end)


@dataclass(frozen=True, slots=True)
class HourlyDetailsQuery:
    """Filtered read of the hourly details table for one window."""

    window: RequestWindow
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    limit: int = DEFAULT_ROW_LIMIT

    def to_params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = [
            ("select", "*"),
            ("timestamp", f"gte.{self.window.start_iso}"),
            ("timestamp", f"lte.{self.window.end_iso}"),
        ]
        if self.latitude is not None:
            params.append(("latitude", f"eq.{format_coordinate(self.latitude)}"))
        if self.longitude is not None:
            params.append(("longitude", f"eq.{format_coordinate(self.longitude)}"))
        params.append(("limit", str(self.limit)))
        return params


@dataclass(frozen=True, slots=True)
class TriggerResponse:
    """Status and body captured from the trigger endpoint."""

    status_code: int
    body: Any
    body_is_json: bool = True

    @property
    def accepted(self) -> bool:
        return self.status_code == ACCEPTED_STATUS

    def ensure_accepted(self) -> "TriggerResponse":
        if not self.accepted:
            raise TriggerRejectedError(self.status_code, self.body)
        return self
