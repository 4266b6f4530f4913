"""API Resilience Implementations.

Contains services for handling API rate limits, failure classification and
retries with exponential backoff.
Bounded Context: API Resilience
"""
