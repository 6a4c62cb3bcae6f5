"""Polling helper: call a probe until its result satisfies a predicate or the timeout elapses"""

import time
from collections.abc import Callable, Sized
from typing import Any, TypeVar

from monitoring_e2e.exceptions import PollTimeoutError, QueryError
from monitoring_e2e.utils import get_logger

logger = get_logger("polling")

T = TypeVar("T")


def non_empty(value: Sized | None) -> bool:
    """Predicate holding for collections with at least one element"""
    return value is not None and len(value) > 0


def poll_until(  # noqa: PLR0913
    probe: Callable[[], T],
    predicate: Callable[[T], bool] = non_empty,
    interval: float = 5,
    timeout: float = 1200,
    description: str = "condition",
    retry_on: tuple[type[Exception], ...] = (QueryError,),
    clock: Callable[[], float] | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> T:
    """Call probe every interval seconds until predicate(result) holds

    Exceptions listed in retry_on are treated as transient: they are recorded
    and the probe is called again. Any other exception propagates.

    Args:
        probe: Function producing the observed value
        predicate: Condition the value must satisfy
        interval: Seconds between two attempts
        timeout: Seconds after which polling gives up
        description: What is waited for, used in logs and the timeout message
        retry_on: Exception types retried until the timeout
        clock: Monotonic time source, time.monotonic by default
        sleep: Function suspending the caller, time.sleep by default

    Returns:
        The first value satisfying the predicate

    Raises:
        PollTimeoutError: If the predicate did not hold before the timeout
    """
    clock = clock or time.monotonic
    sleep = sleep or time.sleep
    deadline = clock() + timeout
    last_value: Any = None
    last_error: Exception | None = None
    attempt = 0

    while True:
        attempt += 1
        try:
            value = probe()
        except retry_on as e:
            last_error = e
            logger.debug("Attempt %d waiting for %s failed: %s", attempt, description, e)
        else:
            last_value, last_error = value, None
            if predicate(value):
                logger.info("Observed %s after %d attempt(s)", description, attempt)
                return value
            logger.debug("Attempt %d waiting for %s: %r", attempt, description, value)

        remaining = deadline - clock()
        if remaining <= 0:
            logger.error("Timed out waiting for %s after %d attempt(s)", description, attempt)
            raise PollTimeoutError(description, timeout, last_value, last_error)
        sleep(min(interval, remaining))
