"""Classifies failed API calls as retryable or fatal.

Only failures that can plausibly clear up on their own are retried: anything
without an HTTP response (connection reset, timeout, ...) and the statuses in
RETRYABLE_STATUS_CODES. Every other status is fatal so that client errors
never consume retry budget or repeat a submission.
"""

import enum
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503})


class FailureClass(enum.Enum):
    RETRYABLE = "retryable"
    FATAL = "fatal"


def status_code_of(error: BaseException) -> Optional[int]:
    """Returns the HTTP status attached to an error, or None."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def classify_failure(error: BaseException) -> FailureClass:
    status = status_code_of(error)
    if status is None:
        return FailureClass.RETRYABLE
    if status in RETRYABLE_STATUS_CODES:
        return FailureClass.RETRYABLE
    logger.debug(f"Status {status} classified as fatal")
    return FailureClass.FATAL


def is_transient(error: BaseException) -> bool:
    return classify_failure(error) is FailureClass.RETRYABLE
