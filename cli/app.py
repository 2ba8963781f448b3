from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Callable, Optional

import typer

from cli.client import SupabaseClient
from cli.config import CheckConfig, load_config
from cli.render import render_rows, render_trigger_response
from errors import ConfigurationError, HourlyCheckError, TriggerRejectedError
from logging_config import configure_logging
from models.records import HourlyDetailsQuery, RequestWindow, ensure_utc
from models.schemas import DEFAULT_SOURCE, TriggerPayload

logger = logging.getLogger(__name__)

_DATETIME_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d"]


class ExitCode(IntEnum):
    OK = 0
    CONFIGURATION = 1
    TRIGGER_REJECTED = 2
    NO_ROWS = 3
    FAILURE = 4


@dataclass
class CLIOptions:
    base_url: Optional[str] = None
    poll_interval: Optional[float] = None
    timeout: Optional[float] = None


@dataclass
class CLIState:
    config: CheckConfig
    client: SupabaseClient


app = typer.Typer(
    help="Trigger the hourly details edge function and wait for its rows to appear.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _fail(message: str, code: ExitCode) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=int(code))


def _open_state(ctx: typer.Context) -> CLIState:
    options = ctx.obj if isinstance(ctx.obj, CLIOptions) else CLIOptions()
    try:
        config = load_config(
            base_url=options.base_url,
            poll_interval=options.poll_interval,
            poll_timeout=options.timeout,
        )
    except ConfigurationError as exc:
        raise _fail(str(exc), ExitCode.CONFIGURATION) from exc
    client = SupabaseClient(config)
    ctx.call_on_close(client.close)
    return CLIState(config=config, client=client)


def _build_window(start: Optional[datetime], end: Optional[datetime], hours: float) -> RequestWindow:
    try:
        if start is None and end is None:
            return RequestWindow.trailing(hours)
        if end is None:
            end = datetime.now(timezone.utc)
        if start is None:
            start = ensure_utc(end) - timedelta(hours=hours)
        return RequestWindow(start=start, end=end)
    except ValueError as exc:
        raise _fail(f"Invalid request window: {exc}", ExitCode.CONFIGURATION) from exc


def _execute(action: Callable[[], ExitCode]) -> None:
    """Run ``action`` and translate its outcome into the process exit code."""
    try:
        code = action()
    except TriggerRejectedError:
        typer.secho("Edge function did not accept the request. Exiting.", fg=typer.colors.RED, err=True)
        code = ExitCode.TRIGGER_REJECTED
    except HourlyCheckError as exc:
        logger.error("Check failed: %s", exc)
        typer.secho(f"Test failed: {exc}", fg=typer.colors.RED, err=True)
        code = ExitCode.FAILURE
    except Exception as exc:  # noqa: BLE001 - top-level boundary, every fault maps to an exit code
        logger.exception("Unexpected failure while running the check")
        typer.secho(f"Test failed: {exc!r}", fg=typer.colors.RED, err=True)
        code = ExitCode.FAILURE
    if code != ExitCode.OK:
        raise typer.Exit(code=int(code))


def _trigger(state: CLIState, payload: TriggerPayload) -> None:
    typer.echo(f"Calling edge function at {state.config.function_url}")
    response = state.client.trigger_update(payload)
    render_trigger_response(response)
    response.ensure_accepted()


def _poll(state: CLIState, query: HourlyDetailsQuery, sample: int) -> ExitCode:
    table = state.config.table_name
    typer.echo(
        f"Polling {table} for upserted rows "
        f"(interval={state.config.poll_interval}s, timeout={state.config.poll_timeout}s)..."
    )
    result = state.client.poll_hourly_details(query)
    rows = result.value or []
    if result.timed_out or not rows:
        logger.warning(
            "No rows found before the poll budget ran out",
            extra={"attempt": result.attempts, "elapsed": round(result.elapsed, 3)},
        )
        typer.secho(
            f"No rows found in {table} within timeout. "
            "Either background job still running or upsert failed.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        return ExitCode.NO_ROWS
    render_rows(rows, table_name=table, sample=sample)
    return ExitCode.OK


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Project base URL (defaults to the SUPABASE_URL env var).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds to wait between empty poll attempts.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Maximum seconds to keep polling for rows.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level for diagnostics written to stderr (defaults to LOG_LEVEL or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    for name, value in (("--poll-interval", poll_interval), ("--timeout", timeout)):
        if value is not None and value <= 0:
            raise _fail(f"Invalid value for {name}: must be positive.", ExitCode.CONFIGURATION)
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise _fail(f"Invalid log level: {exc}", ExitCode.CONFIGURATION) from exc
    ctx.obj = CLIOptions(base_url=base_url, poll_interval=poll_interval, timeout=timeout)


@app.command("run")
def run_command(
    ctx: typer.Context,
    start: Optional[datetime] = typer.Option(
        None, "--start", formats=_DATETIME_FORMATS, help="Window start (UTC when no offset)."
    ),
    end: Optional[datetime] = typer.Option(
        None, "--end", formats=_DATETIME_FORMATS, help="Window end (defaults to now)."
    ),
    hours: float = typer.Option(24.0, "--hours", help="Window length when --start is omitted."),
    location_id: Optional[str] = typer.Option(None, "--location-id", help="Location identifier to forward."),
    station_id: Optional[str] = typer.Option(None, "--station-id", help="NOAA station identifier to forward."),
    source: str = typer.Option(DEFAULT_SOURCE, "--source", help="Free-text source tag for the request."),
    latitude: Optional[float] = typer.Option(None, "--lat", help="Only count rows at this latitude."),
    longitude: Optional[float] = typer.Option(None, "--lon", help="Only count rows at this longitude."),
    sample: int = typer.Option(5, "--sample", min=0, help="How many matching rows to print."),
) -> None:
    """Trigger the edge function, then poll until its rows are visible."""
    window = _build_window(start, end, hours)
    state = _open_state(ctx)

    def action() -> ExitCode:
        payload = TriggerPayload.for_window(
            window, location_id=location_id, noaa_station_id=station_id, source=source
        )
        _trigger(state, payload)
        query = HourlyDetailsQuery(window=window, latitude=latitude, longitude=longitude)
        return _poll(state, query, sample)

    _execute(action)


@app.command("trigger")
def trigger_command(
    ctx: typer.Context,
    start: Optional[datetime] = typer.Option(None, "--start", formats=_DATETIME_FORMATS),
    end: Optional[datetime] = typer.Option(None, "--end", formats=_DATETIME_FORMATS),
    hours: float = typer.Option(24.0, "--hours"),
    location_id: Optional[str] = typer.Option(None, "--location-id"),
    station_id: Optional[str] = typer.Option(None, "--station-id"),
    source: str = typer.Option(DEFAULT_SOURCE, "--source"),
) -> None:
    """Invoke the edge function once without waiting for its rows."""
    window = _build_window(start, end, hours)
    state = _open_state(ctx)

    def action() -> ExitCode:
        payload = TriggerPayload.for_window(
            window, location_id=location_id, noaa_station_id=station_id, source=source
        )
        _trigger(state, payload)
        typer.secho("Request accepted.", fg=typer.colors.GREEN)
        return ExitCode.OK

    _execute(action)


@app.command("poll")
def poll_command(
    ctx: typer.Context,
    start: Optional[datetime] = typer.Option(None, "--start", formats=_DATETIME_FORMATS),
    end: Optional[datetime] = typer.Option(None, "--end", formats=_DATETIME_FORMATS),
    hours: float = typer.Option(24.0, "--hours"),
    latitude: Optional[float] = typer.Option(None, "--lat"),
    longitude: Optional[float] = typer.Option(None, "--lon"),
    sample: int = typer.Option(5, "--sample", min=0),
) -> None:
    """Poll the hourly details table for an already-triggered window."""
    window = _build_window(start, end, hours)
    state = _open_state(ctx)

    def action() -> ExitCode:
        query = HourlyDetailsQuery(window=window, latitude=latitude, longitude=longitude)
        return _poll(state, query, sample)

    _execute(action)
