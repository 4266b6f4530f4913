"""Service for executing API calls with automatic retries.

Implements exponential backoff for handling transient errors like rate
limits (429) or temporary server issues (5xx). Every attempt, retries
included, is admitted through the shared RateLimiter, so backoff delay and
rate-limit delay both apply.
"""

import logging
import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from triagecli.infrastructure.resilience.rate_limiter import RateLimiter
from triagecli.infrastructure.resilience.failure_classifier import (
    FailureClass,
    classify_failure,
    status_code_of,
)
from triagecli.domain.events.api_events import (
    ApiCallInitiated, ApiCallSucceeded, ApiCallFailed, RetryScheduled
)
from triagecli.domain.models.common import BackoffPolicy
from triagecli.domain.models.errors import MaxRetryError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_BACKOFF_SECONDS = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0


def dispatch_event(event: Any) -> None:
    logger.debug(f"EVENT: {event}")


def _summarize(error: BaseException) -> str:
    status = status_code_of(error)
    if status is not None:
        return f"HTTP {status}"
    return f"{type(error).__name__}: {error}" if str(error) else type(error).__name__


class ApiRetryService:
    """Handles API call execution with rate limiting and retries."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        classifier: Callable[[BaseException], FailureClass] = classify_failure,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_SECONDS,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        max_backoff_s: Optional[float] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            rate_limiter: The rate limiter every attempt is scheduled through.
            classifier: Decides whether a failure is retryable or fatal.
            max_retries: Maximum number of attempts after the first one.
            initial_backoff_s: Delay in seconds before the first retry.
            backoff_factor: Multiplier for the backoff delay (2 = exponential).
            max_backoff_s: Optional ceiling for a single backoff delay.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.rate_limiter = rate_limiter
        self.classifier = classifier
        self.max_retries = max_retries
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self.max_backoff_s = max_backoff_s

        logger.info(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"initial_backoff={initial_backoff_s}s, factor={backoff_factor}"
        )

    @classmethod
    def from_policy(cls, rate_limiter: RateLimiter, policy: BackoffPolicy) -> "ApiRetryService":
        return cls(
            rate_limiter=rate_limiter,
            max_retries=policy["max_retries"],
            initial_backoff_s=policy["initial_delay"],
            backoff_factor=policy["factor"],
            max_backoff_s=policy.get("max_delay"),
        )

    def backoff_for(self, retry_number: int) -> float:
        """Delay before retry ``retry_number`` (1-based)."""
        delay = self.initial_backoff_s * (self.backoff_factor ** (retry_number - 1))
        if self.max_backoff_s is not None:
            delay = min(delay, self.max_backoff_s)
        return delay

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        endpoint_name: Optional[str] = None,
        **kwargs: Any
    ) -> T:
        """Executes an async function with rate limiting and retries.

        Args:
            func: The async function (API call) to execute.
            *args: Positional arguments for the function.
            endpoint_name: Name used in logs and events (defaults to func name).
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the first successful attempt.

        Raises:
            MaxRetryError: If every attempt failed with a retryable error.
            Exception: The original error, as soon as one is classified fatal.
        """
        endpoint = endpoint_name or getattr(func, "__name__", "call")
        total_attempts = self.max_retries + 1
        last_exception: Optional[Exception] = None

        for attempt in range(1, total_attempts + 1):
            try:
                dispatch_event(ApiCallInitiated(endpoint=endpoint, attempt_number=attempt))
                start_time = time.perf_counter()
                result = await self.rate_limiter.schedule(func, *args, **kwargs)
                latency_ms = (time.perf_counter() - start_time) * 1000
                dispatch_event(ApiCallSucceeded(endpoint=endpoint, attempt_number=attempt, latency_ms=latency_ms))
                return result
            except Exception as e:
                last_exception = e
                if self.classifier(e) is FailureClass.FATAL:
                    logger.error(f"Non-retryable error calling {endpoint} on attempt {attempt}: {_summarize(e)}")
                    dispatch_event(ApiCallFailed(
                        endpoint=endpoint, error_type=type(e).__name__,
                        error_message=str(e), status_code=status_code_of(e),
                    ))
                    raise

                logger.warning(f"retry #{attempt} after error: {_summarize(e)} ({endpoint})")
                if attempt < total_attempts:
                    delay = self.backoff_for(attempt)
                    dispatch_event(RetryScheduled(endpoint=endpoint, attempt_number=attempt, delay_seconds=delay))
                    await asyncio.sleep(delay)

        logger.error(f"Max retries ({self.max_retries}) reached for {endpoint}. Last error: {last_exception}")
        dispatch_event(ApiCallFailed(
            endpoint=endpoint, error_type=type(last_exception).__name__,
            error_message=str(last_exception), status_code=status_code_of(last_exception),
        ))
        raise MaxRetryError(last_exception, total_attempts)
