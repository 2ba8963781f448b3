from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from cli.config import CheckConfig
from errors import PollRequestError, PollResponseError
from models.records import HourlyDetailsQuery, TriggerResponse
from models.schemas import TriggerPayload
from services.poller import PollResult, poll_until

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class SupabaseClient:
    """Blocking client for the edge function and the hourly details table."""

    def __init__(
        self,
        config: CheckConfig,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(timeout=config.http_timeout, transport=transport)
        self._clock = clock
        self._sleep = sleep

    def close(self) -> None:
        self._client.close()

    def trigger_update(self, payload: TriggerPayload) -> TriggerResponse:
        url = self._config.function_url
        response = self._client.post(
            url,
            json=payload.to_json(),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._config.api_key}",
            },
        )
        result = self._parse_trigger_response(response)
        logger.info(
            "Edge function responded",
            extra={"url": url, "status": result.status_code},
        )
        return result

    def fetch_hourly_details(self, query: HourlyDetailsQuery) -> List[Row]:
        url = self._config.table_url
        response = self._client.get(
            url,
            params=query.to_params(),
            headers={
                "apikey": self._config.api_key,
                "Authorization": f"Bearer {self._config.api_key}",
            },
        )
        if not response.is_success:
            raise PollRequestError(response.status_code, response.text)
        try:
            rows = response.json()
        except ValueError as exc:
            raise PollResponseError(f"body is not valid JSON ({exc})", response.text) from exc
        if not isinstance(rows, list):
            raise PollResponseError(
                f"expected a JSON array, got {type(rows).__name__}", response.text
            )
        return rows

    def poll_hourly_details(
        self,
        query: HourlyDetailsQuery,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> PollResult[List[Row]]:
        interval = self._config.poll_interval if interval is None else interval
        timeout = self._config.poll_timeout if timeout is None else timeout

        attempt = 0

        def fetch() -> List[Row]:
            nonlocal attempt
            attempt += 1
            rows = self.fetch_hourly_details(query)
            logger.debug(
                "Polled hourly details",
                extra={"attempt": attempt, "row_count": len(rows)},
            )
            return rows

        return poll_until(
            fetch,
            bool,
            interval=interval,
            timeout=timeout,
            clock=self._clock,
            sleep=self._sleep,
        )

    @staticmethod
    def _parse_trigger_response(response: httpx.Response) -> TriggerResponse:
        text = response.text
        if not text:
            return TriggerResponse(status_code=response.status_code, body=None)
        try:
            body = json.loads(text)
        except ValueError as exc:
            logger.warning(
                "Edge function returned a non-JSON body; keeping raw text",
                extra={"status": response.status_code, "reason": str(exc)},
            )
            return TriggerResponse(
                status_code=response.status_code, body=text, body_is_json=False
            )
        return TriggerResponse(status_code=response.status_code, body=body)
