from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import LOG_LEVELS, get_settings

_DEFAULT_EXTRA_KEYS = (
    "url",
    "status",
    "attempt",
    "row_count",
    "elapsed",
    "timeout",
    "window_start",
    "window_end",
    "reason",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts: list[str] = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            context_parts.append(f"{key}={value}")
        if not context_parts:
            return message
        # Keep any formatted traceback after the context suffix.
        head, sep, tail = message.partition("\n")
        return f"{head} | {' '.join(context_parts)}{sep}{tail}"


def resolve_log_level(level: str | int) -> str | int:
    """Normalize a level name, raising ``ValueError`` for unknown names."""
    if isinstance(level, int):
        return level
    candidate = level.strip().upper()
    if candidate not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}.")
    return candidate


def configure_logging(level: str | int | None = None) -> None:
    """Configure process-wide logging with contextual formatting.

    Diagnostics go to stderr so stdout stays reserved for the check's own
    progress output.
    """
    global _configured
    if _configured:
        if level is not None:
            logging.getLogger().setLevel(resolve_log_level(level))
        return

    log_level = resolve_log_level(level if level is not None else get_settings().log_level)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
