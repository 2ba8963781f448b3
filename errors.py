"""Exceptions raised by the hourly details check."""

from __future__ import annotations

from typing import Any, Iterable


class HourlyCheckError(Exception):
    """Base class for failures the CLI maps to an exit code."""


class ConfigurationError(HourlyCheckError):

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


class TriggerRejectedError(HourlyCheckError):
    """The trigger endpoint answered with something other than 202 Accepted."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"Trigger was not accepted: status {status_code}: {body!r}")
        self.status_code = status_code
        self.body = body


class PollRequestError(HourlyCheckError):
    """The read endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Failed fetching hourly details: {status_code} {body}")
        self.status_code = status_code
        self.body = body


class PollResponseError(HourlyCheckError):
    """The read endpoint answered 2xx with a body that is not a JSON array."""

    def __init__(self, reason: str, body: str) -> None:
        super().__init__(f"Unexpected hourly details response: {reason}")
        self.reason = reason
        self.body = body
