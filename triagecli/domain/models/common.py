"""Defines common Value Objects used across different domain contexts.

These objects represent simple values such as patient identifiers and
backoff settings, ensuring consistency and type safety.
"""

from typing import NewType, Optional, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
PatientId = NewType("PatientId", str)          # Upstream patient identifier

# --- Structured Data ---

class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_retries: int
    initial_delay: float
    factor: float
    max_delay: Optional[float]


class AssessmentPayload(TypedDict):
    """Body of the submission call."""
    high_risk_patients: list[str]
    fever_patients: list[str]
    data_quality_issues: list[str]
