"""Deadlines and condition polling.

Waits in clickflow poll an observable condition instead of sleeping for a
fixed time. Every wait is clipped to the request Deadline so a hung page
cannot hold a browser past the request budget.
"""

import time
from typing import Callable

from playwright.sync_api import Page

from clickflow.core.errors import RequestTimeout
from clickflow.core.logging import logForDebugging

DEFAULT_POLL_INTERVAL_MS = 100.0


class Deadline:
    """A point in time after which a request must stop working.

    Args:
        total_ms: Budget in milliseconds, counted from construction.
        clock: Monotonic clock returning seconds (injectable for tests).
    """

    def __init__(self, total_ms: float, clock: Callable[[], float] = time.monotonic) -> None:
        if total_ms <= 0:
            raise ValueError(f"total_ms must be positive, got {total_ms}")
        self._clock = clock
        self._total_ms = total_ms
        self._expires_at = clock() + total_ms / 1000.0

    @property
    def total_ms(self) -> float:
        return self._total_ms

    def remaining_ms(self) -> float:
        """Milliseconds left before expiry (never negative)."""
        return max(0.0, (self._expires_at - self._clock()) * 1000.0)

    @property
    def expired(self) -> bool:
        return self.remaining_ms() <= 0

    def clip(self, timeout_ms: float) -> float:
        """Clip a per-operation timeout to the time left."""
        return min(timeout_ms, self.remaining_ms())

    def check(self, step: str | None = None) -> None:
        """Raise RequestTimeout if the deadline has passed.

        Raises:
            RequestTimeout: If no time is left.
        """
        if self.expired:
            raise RequestTimeout(
                f"Request exceeded its {self._total_ms:.0f}ms budget",
                step=step,
            )


def clip_timeout(timeout_ms: float, deadline: Deadline | None) -> float:
    if deadline is None:
        return timeout_ms
    return deadline.clip(timeout_ms)


def call_timeout(timeout_ms: float, deadline: Deadline | None, step: str | None = None) -> float:
    """Clip a timeout that will be handed to a Playwright call.

    Playwright reads timeout=0 as "no timeout", so an exhausted deadline
    raises instead of returning 0.

    Raises:
        RequestTimeout: If the deadline has no time left.
    """
    if deadline is None:
        return timeout_ms
    clipped = deadline.clip(timeout_ms)
    if clipped <= 0:
        raise RequestTimeout(
            f"Request exceeded its {deadline.total_ms:.0f}ms budget",
            step=step,
        )
    return clipped


def wait_until(
    page: Page,
    predicate: Callable[[], bool],
    timeout_ms: float,
    interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
    deadline: Deadline | None = None,
) -> bool:
    """Poll a predicate until it holds or the timeout expires.

    The predicate is always evaluated at least once. Exceptions raised by
    the predicate (for example while the page is navigating) count as
    "not yet". Between polls the page's own event loop is given time via
    page.wait_for_timeout.

    Args:
        page: The Playwright Page used to yield between polls.
        predicate: Zero-argument callable returning True when satisfied.
        timeout_ms: Maximum time to poll.
        interval_ms: Delay between polls.
        deadline: Optional request deadline that further bounds the wait.

    Returns:
        True if the predicate held within the timeout, False otherwise.
    """
    budget_ms = clip_timeout(timeout_ms, deadline)
    end = time.monotonic() + budget_ms / 1000.0

    while True:
        try:
            if predicate():
                return True
        except Exception as e:
            logForDebugging(f"Condition check raised, retrying: {e}")

        remaining_ms = (end - time.monotonic()) * 1000.0
        if remaining_ms <= 0:
            return False
        page.wait_for_timeout(min(interval_ms, remaining_ms))
