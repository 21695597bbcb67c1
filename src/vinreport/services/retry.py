"""Generic bounded retry loop for async operations.

A RetryPolicy owns the attempt budget and the delay schedule; call sites
supply the operation and a success predicate, so the schedule can change
(fixed, exponential, jittered) without touching them.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DelayFn = Callable[[int], float]
SleepFn = Callable[[float], Awaitable[None]]


def fixed_delay(seconds: float) -> DelayFn:
    """Same delay after every failed attempt."""

    def delay(attempt: int) -> float:
        return seconds

    return delay


def exponential_backoff(
    base_seconds: float,
    *,
    factor: float = 2.0,
    max_seconds: float = 30.0,
    jitter: bool = False,
) -> DelayFn:
    """base * factor**(attempt-1), capped, with optional full jitter."""

    def delay(attempt: int) -> float:
        value = min(base_seconds * factor ** (attempt - 1), max_seconds)
        if jitter:
            value = random.uniform(0, value)
        return value

    return delay


@dataclass
class RetryOutcome(Generic[T]):
    value: T | None
    attempts: int
    succeeded: bool


@dataclass
class RetryPolicy:
    """Bounded retry: at most max_attempts calls, delay_fn(n) seconds after failure n."""

    max_attempts: int = 5
    delay_fn: DelayFn = field(default_factory=lambda: fixed_delay(3.0))
    sleep: SleepFn = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        is_success: Callable[[T], bool],
        *,
        retry_on: tuple[type[BaseException], ...] = (),
        label: str = "operation",
    ) -> RetryOutcome[T]:
        """Call operation until is_success(result) or the budget is spent.

        Exceptions listed in retry_on count as a failed attempt; anything
        else propagates. No delay follows the final attempt.
        """
        last: T | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                last = await operation()
            except retry_on as e:
                logger.warning("%s attempt %d/%d raised: %s", label, attempt, self.max_attempts, e)
                last = None
            else:
                if is_success(last):
                    return RetryOutcome(value=last, attempts=attempt, succeeded=True)
                logger.info("%s attempt %d/%d not ready", label, attempt, self.max_attempts)

            if attempt < self.max_attempts:
                await self.sleep(self.delay_fn(attempt))

        return RetryOutcome(value=last, attempts=self.max_attempts, succeeded=False)
