"""Exceptions raised by the triage pipeline.

Transport errors from httpx that are classified as fatal are re-raised
untouched; the types below cover the pipeline's own failure modes.
"""

from typing import Any, Optional


class TriageError(Exception):
    """Base class for all triagecli errors."""


class MaxRetryError(TriageError):
    """Exception raised when max retries are exceeded."""
    def __init__(self, original_exception: Exception, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"Max retries exhausted after {attempts} attempts. Last error: {original_exception}")


class UnrecognizedPayloadError(TriageError):
    """The listing response had no recognizable patient batch."""
    def __init__(self, page: int, reason: str, payload: Any = None):
        self.page = page
        self.reason = reason
        self.payload = payload
        super().__init__(f"Unrecognised payload on page {page}: {reason}")


class SubmissionError(TriageError):
    """The assessment submission was rejected by the upstream API."""
    def __init__(self, status_code: Optional[int], body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Assessment submission failed with status {status_code}")


def decode_body(response: Any) -> Any:
    """Returns the JSON body of an HTTP response, or the raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def error_payload(error: BaseException) -> Any:
    """Returns the response payload attached to an error, if any.

    Unwraps MaxRetryError to the last underlying failure.
    """
    if isinstance(error, MaxRetryError):
        return error_payload(error.original_exception)
    if isinstance(error, SubmissionError):
        return error.body
    if isinstance(error, UnrecognizedPayloadError):
        return error.payload
    response = getattr(error, "response", None)
    if response is None:
        return None
    body = decode_body(response)
    return None if body == "" else body
