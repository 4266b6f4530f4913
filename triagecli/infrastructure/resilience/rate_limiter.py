"""Implementation of a rate limiter.

Controls the frequency of outgoing requests to prevent hitting API rate limits.
Enforces a fixed minimum interval between the start of consecutive calls.
"""

import time
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from triagecli.domain.events.api_events import ApiCallDeferred

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_INTERVAL_SECONDS = 0.35 # ~3 requests per second


class RateLimiter:
    """Minimum-interval rate limiter shared by every call of a run.

    Callers are admitted one at a time in FIFO order (asyncio.Lock is fair),
    and each admission is spaced at least ``min_interval`` seconds after the
    previous one. Only the start of the work is throttled; the work itself
    runs outside the lock.
    """

    def __init__(self, min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS):
        """Initializes the rate limiter.

        Args:
            min_interval: Minimum seconds between consecutive admissions.
        """
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._last_start: Optional[float] = None
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: min interval {min_interval:.3f}s")

    def _time_until_next_slot(self) -> float:
        if self._last_start is None:
            return 0.0
        return max(0.0, self._last_start + self.min_interval - time.monotonic())

    async def wait_for_permission(self) -> None:
        """Waits until the next call is permitted and claims the slot."""
        async with self._lock:
            wait_time = self._time_until_next_slot()
            if wait_time > 0:
                logger.debug(f"EVENT: {ApiCallDeferred(wait_time_seconds=wait_time)}")
                await asyncio.sleep(wait_time)
            self._last_start = time.monotonic()
            logger.debug("Rate limit permission granted.")

    async def schedule(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Runs ``func`` once a slot is granted and returns its result unchanged."""
        await self.wait_for_permission()
        return await func(*args, **kwargs)

    async def get_wait_time(self) -> float:
         """Estimates the time needed before the next request can be made."""
         async with self._lock:
             return self._time_until_next_slot()
