from __future__ import annotations

import logging

import pytest

from logging_config import ContextualFormatter, resolve_log_level


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="cli.client",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Edge function responded",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    line = formatter.format(_record(status=202, attempt=None, unrelated="x"))

    assert line == "INFO Edge function responded | status=202"


def test_formatter_without_context_leaves_message_alone() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["row_count"])

    assert formatter.format(_record(status=202)) == "Edge function responded"


def test_timestamps_are_rendered_in_utc() -> None:
    formatter = ContextualFormatter(fmt="%(asctime)sZ %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
    record = _record()
    record.created = 0.0

    assert formatter.format(record) == "1970-01-01T00:00:00Z Edge function responded"


def test_resolve_log_level_normalizes_and_rejects_unknown_names() -> None:
    assert resolve_log_level(" warning ") == "WARNING"
    assert resolve_log_level(logging.DEBUG) == logging.DEBUG
    with pytest.raises(ValueError, match="verbose"):
        resolve_log_level("verbose")
