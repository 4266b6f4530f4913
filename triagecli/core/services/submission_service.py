"""Core service for submitting the assessment.

The upstream grants only a few submission attempts, so the call is made
exactly once and is never routed through the retry service.
"""

import logging
from typing import Any

import httpx

from triagecli.domain.interfaces.patient_api import PatientApi
from triagecli.domain.models.errors import SubmissionError, decode_body
from triagecli.domain.models.patient import AlertLists

logger = logging.getLogger(__name__)


class SubmissionService:
    """Posts the three alert lists once and returns the raw response."""

    def __init__(self, api: PatientApi):
        self.api = api

    async def submit_once(self, alerts: AlertLists) -> Any:
        """Submits the alert lists.

        Returns:
            The decoded response body, untouched.

        Raises:
            SubmissionError: The API answered with an error status.
            httpx.TransportError: The request never got a response.
        """
        payload = alerts.to_payload()
        logger.info(
            f"Submitting assessment: {len(payload['high_risk_patients'])} high-risk, "
            f"{len(payload['fever_patients'])} fever, {len(payload['data_quality_issues'])} data-quality"
        )
        try:
            response = await self.api.submit_assessment(payload)
        except httpx.HTTPStatusError as e:
            body = decode_body(e.response)
            logger.error(f"Submission rejected with status {e.response.status_code}: {body}")
            raise SubmissionError(e.response.status_code, body) from e
        logger.info("Assessment submitted")
        return response
