"""Unit tests for the fixed-interval poll loop."""

from __future__ import annotations

import pytest

from services.poller import poll_until


def test_returns_immediately_when_first_attempt_succeeds(clock) -> None:
    calls = []

    def fetch() -> list:
        calls.append(clock.now)
        return ["row"]

    result = poll_until(fetch, bool, interval=3, timeout=120, clock=clock, sleep=clock.sleep)

    assert result.value == ["row"]
    assert result.attempts == 1
    assert result.timed_out is False
    assert clock.sleeps == []


def test_waits_fixed_interval_between_empty_attempts(clock) -> None:
    replies = [[], [], ["row"]]

    result = poll_until(
        lambda: replies.pop(0), bool, interval=3, timeout=120, clock=clock, sleep=clock.sleep
    )

    assert result.value == ["row"]
    assert result.attempts == 3
    assert clock.sleeps == [3, 3]
    assert result.elapsed == 6


def test_times_out_without_raising(clock) -> None:
    result = poll_until(lambda: [], bool, interval=3, timeout=120, clock=clock, sleep=clock.sleep)

    assert result.timed_out is True
    assert result.value == []
    # Attempts start at t=0, 3, ..., 117; the check at t=120 ends the loop.
    assert result.attempts == 40
    assert result.elapsed == 120


def test_zero_budget_makes_no_attempt(clock) -> None:
    def fetch() -> list:
        raise AssertionError("fetch should not be called")

    result = poll_until(fetch, bool, interval=3, timeout=0, clock=clock, sleep=clock.sleep)

    assert result.timed_out is True
    assert result.attempts == 0
    assert result.value is None


def test_in_flight_attempt_is_allowed_to_finish(clock) -> None:
    def slow_fetch() -> list:
        clock.now += 200
        return ["late row"]

    result = poll_until(slow_fetch, bool, interval=3, timeout=120, clock=clock, sleep=clock.sleep)

    assert result.timed_out is False
    assert result.value == ["late row"]
    assert result.elapsed == 200


def test_fetch_errors_propagate_without_retry(clock) -> None:
    attempts = []

    def fetch() -> list:
        attempts.append(1)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        poll_until(fetch, bool, interval=3, timeout=120, clock=clock, sleep=clock.sleep)

    assert len(attempts) == 1
    assert clock.sleeps == []


def test_negative_interval_is_rejected(clock) -> None:
    with pytest.raises(ValueError):
        poll_until(lambda: [], bool, interval=-1, timeout=10, clock=clock, sleep=clock.sleep)
