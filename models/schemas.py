"""Pydantic schemas for request bodies sent to the remote function."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from models.records import RequestWindow, ensure_utc, format_timestamp

DEFAULT_SOURCE = "test-script"


class TriggerPayload(BaseModel):
    """Body of the ``update-hourly-details`` invocation."""

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="Inclusive start of the window to process.")
    end: datetime = Field(..., description="Inclusive end of the window to process.")
    location_id: Optional[str] = None
    noaa_station_id: Optional[str] = None
    source: Optional[str] = DEFAULT_SOURCE

    @field_validator("start", "end")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_window(self) -> "TriggerPayload":
        if self.start >= self.end:
            raise ValueError("start must be before end")
        return self

    @field_serializer("start", "end")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def for_window(cls, window: RequestWindow, **fields: Any) -> "TriggerPayload":
        return cls(start=window.start, end=window.end, **fields)

    @property
    def window(self) -> RequestWindow:
        return RequestWindow(start=self.start, end=self.end)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
