"""Core service running one assessment: fetch, score, submit.

Fetching goes through the retrying caller and the shared rate limiter;
scoring is pure; submission happens at most once per run.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from triagecli.core.context import PipelineContext
from triagecli.core.services.submission_service import SubmissionService
from triagecli.domain.models.patient import AlertLists, PatientRecord
from triagecli.domain.services.risk_scoring import build_alert_lists
from triagecli.infrastructure.pagination.patient_fetcher import PatientFetcher

logger = logging.getLogger(__name__)


@dataclass
class AssessmentReport:
    """Outcome of a run, handed to the UI."""
    patients: List[PatientRecord]
    alerts: AlertLists
    submitted: bool = False
    response: Optional[Any] = None


class AssessmentService:
    """Orchestrates the fetch, score and submit steps."""

    def __init__(self, context: PipelineContext):
        self.context = context
        self.fetcher = PatientFetcher(
            api=context.api,
            retry_service=context.retry_service,
            page_size=context.page_size,
        )
        self.submission_service = SubmissionService(api=context.api)

    async def classify(self) -> AssessmentReport:
        """Fetches every patient and builds the alert lists."""
        patients = await self.fetcher.fetch_all()
        alerts = build_alert_lists(patients)
        logger.info(f"Classified {len(patients)} patients: {alerts.counts()}")
        return AssessmentReport(patients=patients, alerts=alerts)

    async def submit(self, report: AssessmentReport) -> AssessmentReport:
        """Submits the report's alert lists once and records the response."""
        report.response = await self.submission_service.submit_once(report.alerts)
        report.submitted = True
        return report

    async def aclose(self) -> None:
        await self.context.api.aclose()
