from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

import typer

from models.records import TriggerResponse


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _dump(value: Any) -> str:
    return json.dumps(value, default=str, sort_keys=True)


def render_trigger_response(response: TriggerResponse) -> None:
    echo_heading("Edge function response")
    body = _dump(response.body) if response.body_is_json else response.body
    echo_key_values(
        [
            ("status", response.status_code),
            ("body", body),
        ]
    )
    if not response.body_is_json:
        typer.secho("Response body was not valid JSON.", fg=typer.colors.YELLOW, err=True)


def render_rows(rows: Sequence[Mapping[str, Any]], table_name: str, sample: int = 5) -> None:
    shown = list(rows[: max(sample, 0)])
    echo_heading(f"Found {len(rows)} rows in {table_name} (sample {len(shown)}):")
    for row in shown:
        typer.echo(f"  - {_dump(row)}")
