"""Bounded-time polling with exponential backoff.

This module provides polling helpers to replace hardcoded time.sleep() calls
in test code. Both helpers share one backoff schedule: attempts start 1 ms
apart and the delay doubles after every failed attempt, so conditions that
resolve quickly are seen almost immediately while slow conditions still get
the whole budget.

Backoff Schedule:
    For a budget of B milliseconds:

    1. Run up to max(round(log2(B)), 1) fast attempts, sleeping 1, 2, 4, ...
       ms after each failed one.
    2. Sleep whatever is left of B (never negative).
    3. Make exactly one final attempt.

    A budget of 1024 ms gives 10 fast attempts (1023 ms of sleep), a 1 ms
    wait and then the final attempt: 11 invocations in total.

Functions:
    retry_until: Retry a code block until it stops raising AssertionError
    poll_until: Poll a predicate until it returns True

Example:
    from randomized_testing.fixtures.polling import poll_until, retry_until

    def check() -> None:
        assert cluster.health() == "green"

    retry_until(check, max_wait=30.0)

    if not poll_until(lambda: queue.empty(), max_wait=5.0):
        pytest.fail("queue never drained")
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import timedelta
from typing import TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Default budget in seconds when the caller does not pass one
DEFAULT_MAX_WAIT = 10.0

Sleeper = Callable[[float], None]


class PollingConfig(BaseModel):
    """Validated arguments for one retry_until/poll_until call.

    Attributes:
        max_wait: Budget as a timedelta. Plain numbers are read as seconds.
            Must be strictly positive.
        description: What is being waited for, used in log events.
    """

    model_config = ConfigDict(frozen=True)

    max_wait: timedelta = Field(
        default=timedelta(seconds=DEFAULT_MAX_WAIT),
        description="Maximum total wait time",
    )
    description: str = Field(
        default="condition",
        min_length=1,
        description="Description for log events",
    )

    @field_validator("max_wait", mode="before")
    @classmethod
    def _seconds_to_timedelta(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(seconds=value)
        return value

    @field_validator("max_wait")
    @classmethod
    def _must_be_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError(f"max_wait must be positive, got {value}")
        return value

    @property
    def budget_millis(self) -> int:
        """The budget in whole milliseconds, truncated by integer division."""
        return self.max_wait // timedelta(milliseconds=1)


def fast_attempt_count(budget_millis: int) -> int:
    """Number of fast attempts made before the final wait.

    Roughly the number of doublings needed to span the budget starting from
    1 ms, never less than one. Rounds half up.

    Examples:
        >>> fast_attempt_count(1024)
        10
        >>> fast_attempt_count(10_000)
        13
        >>> fast_attempt_count(1)
        1
    """
    if budget_millis <= 0:
        return 1
    doublings = math.log10(budget_millis) / math.log10(2)
    return max(math.floor(doublings + 0.5), 1)


def backoff_delays(budget_millis: int) -> list[int]:
    """Delays in milliseconds slept after each failed fast attempt.

    Examples:
        >>> backoff_delays(16)
        [1, 2, 4, 8]
    """
    return [1 << attempt for attempt in range(fast_attempt_count(budget_millis))]


def _polling_config(max_wait: float | timedelta, description: str) -> PollingConfig:
    return PollingConfig(max_wait=max_wait, description=description)


def _sleep_millis(sleep: Sleeper, millis: int) -> None:
    sleep(millis / 1000.0)


def retry_until(
    code_block: Callable[[], T],
    max_wait: float | timedelta = DEFAULT_MAX_WAIT,
    *,
    description: str = "condition",
    sleep: Sleeper = time.sleep,
) -> T:
    """Run a code block until no assertion trips, within a time budget.

    The code block is called on the current thread. An AssertionError means
    "not yet" and triggers another attempt after the next backoff delay. Any
    other exception propagates immediately.

    Args:
        code_block: Callable to retry. Its return value is passed through;
            blocks that return None are fine.
        max_wait: Budget in seconds, or a timedelta. Defaults to 10 seconds.
        description: What is being waited for, used in log events.
        sleep: Suspend primitive taking seconds. Defaults to time.sleep.

    Returns:
        Whatever the first successful call of code_block returned.

    Raises:
        AssertionError: The failure from the final attempt once the budget
            is exhausted. Every earlier failure is attached, oldest first,
            as a "Suppressed: ..." exception note.
        pydantic.ValidationError: If max_wait is not strictly positive.

    Example:
        def replicas_started() -> int:
            started = count_started_replicas()
            assert started == 3, f"only {started} replicas started"
            return started

        retry_until(replicas_started, max_wait=timedelta(seconds=30))
    """
    config = _polling_config(max_wait, description)
    budget = config.budget_millis
    failures: list[AssertionError] = []
    slept = 0

    for delay in backoff_delays(budget):
        try:
            return code_block()
        except AssertionError as e:
            failures.append(e)
            logger.debug(
                "retry_until.attempt_failed",
                description=config.description,
                attempt=len(failures),
                next_delay_ms=delay,
                error=str(e),
            )
        slept += delay
        _sleep_millis(sleep, delay)

    _sleep_millis(sleep, max(budget - slept, 0))
    try:
        return code_block()
    except AssertionError as e:
        logger.warning(
            "retry_until.budget_exhausted",
            description=config.description,
            max_wait_ms=budget,
            attempts=len(failures) + 1,
        )
        for failure in failures:
            e.add_note(f"Suppressed: {type(failure).__name__}: {failure}")
        raise


def poll_until(
    predicate: Callable[[], object],
    max_wait: float | timedelta = DEFAULT_MAX_WAIT,
    *,
    description: str = "condition",
    sleep: Sleeper = time.sleep,
) -> bool:
    """Poll a predicate until it is true, within a time budget.

    Uses the same backoff schedule as retry_until but never raises on
    timeout. Exceptions from the predicate are not caught.

    Args:
        predicate: Zero-argument callable, interpreted by truthiness.
        max_wait: Budget in seconds, or a timedelta. Defaults to 10 seconds.
        description: What is being waited for, used in log events.
        sleep: Suspend primitive taking seconds. Defaults to time.sleep.

    Returns:
        True as soon as the predicate is true, False if it is still false
        after the final attempt.

    Raises:
        pydantic.ValidationError: If max_wait is not strictly positive.

    Example:
        assert poll_until(lambda: job.done(), max_wait=5.0)
    """
    config = _polling_config(max_wait, description)
    budget = config.budget_millis
    slept = 0

    for delay in backoff_delays(budget):
        if predicate():
            return True
        slept += delay
        _sleep_millis(sleep, delay)

    _sleep_millis(sleep, max(budget - slept, 0))
    if predicate():
        return True

    logger.debug(
        "poll_until.budget_exhausted",
        description=config.description,
        max_wait_ms=budget,
    )
    return False


# Module exports
__all__ = [
    "DEFAULT_MAX_WAIT",
    "PollingConfig",
    "backoff_delays",
    "fast_attempt_count",
    "poll_until",
    "retry_until",
]
