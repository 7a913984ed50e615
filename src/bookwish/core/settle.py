# ABOUTME: Bounded poll-with-backoff used after creating records in the acquisition backend.
# ABOUTME: Replaces fixed sleeps: re-checks until a condition holds or the attempts run out.

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SettlePolicy:
    """Delay schedule for waiting on asynchronous indexing.

    The first wait is `initial_delay`; each later wait is multiplied by
    `backoff` and capped at `max_delay`. At most `max_attempts` checks run.
    """

    initial_delay: float
    max_attempts: int = 5
    backoff: float = 2.0
    max_delay: float = 15.0

    def delays(self) -> Iterator[float]:
        delay = self.initial_delay
        for _ in range(max(self.max_attempts, 1)):
            yield min(delay, self.max_delay)
            delay *= self.backoff


def wait_until(
    check: Callable[[], T],
    ready: Callable[[T], bool],
    policy: SettlePolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "backend",
) -> T:
    """Sleep, run `check`, and stop once `ready(result)` is true.

    Returns the last result even when the attempts run out; running out is
    logged, not raised, because callers fall back to their own handling.
    """
    result: T | None = None
    attempt = 0
    for attempt, delay in enumerate(policy.delays(), start=1):
        if delay > 0:
            sleep(delay)
        result = check()
        if ready(result):
            logger.debug("%s settled after %d check(s)", description, attempt)
            return result
    logger.warning("%s did not settle after %d check(s)", description, attempt)
    return result  # type: ignore[return-value]
