"""Fixed-interval polling with a wall-clock budget."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollResult(Generic[T]):
    """Outcome of :func:`poll_until`.

    ``value`` is the last fetched value, which is the satisfying one unless
    ``timed_out`` is set. It is ``None`` only when no attempt was made.
    """

    value: Optional[T]
    attempts: int
    elapsed: float
    timed_out: bool


def poll_until(
    fetch: Callable[[], T],
    is_done: Callable[[T], bool],
    *,
    interval: float,
    timeout: float,
    clock: Optional[Callable[[], float]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> PollResult[T]:
    """Call ``fetch`` until ``is_done`` accepts its result or ``timeout`` elapses.

    The budget is checked before every attempt, so a request already in
    flight when the deadline passes is allowed to finish. Exceptions from
    ``fetch`` propagate immediately.
    """
    if interval < 0:
        raise ValueError("interval must not be negative")
    clock = clock or time.monotonic
    sleep = sleep or time.sleep

    started = clock()
    attempts = 0
    last: Optional[T] = None
    while True:
        elapsed = clock() - started
        if elapsed >= timeout:
            logger.debug(
                "Poll budget exhausted",
                extra={"attempt": attempts, "elapsed": round(elapsed, 3), "timeout": timeout},
            )
            return PollResult(value=last, attempts=attempts, elapsed=elapsed, timed_out=True)

        attempts += 1
        last = fetch()
        if is_done(last):
            return PollResult(
                value=last, attempts=attempts, elapsed=clock() - started, timed_out=False
            )
        sleep(interval)
