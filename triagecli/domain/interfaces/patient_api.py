"""Interface for the upstream patient API.

Defines the contract for listing patients page by page and for submitting
the final assessment. Implementations decide transport, base URL and auth.
"""

import abc
from typing import Any

from triagecli.domain.models.common import AssessmentPayload


class PatientApi(abc.ABC):
    """Abstract Base Class for patient API interactions."""

    @abc.abstractmethod
    async def list_patients(self, page: int, limit: int) -> Any:
        """Fetches one listing page asynchronously.

        Args:
            page: 1-based page number.
            limit: Page size requested from the server.

        Returns:
            The decoded response body, unvalidated.

        Raises:
            Exception: Transport errors or non-2xx statuses. Callers classify
                them; implementations must not retry on their own.
        """
        pass

    @abc.abstractmethod
    async def submit_assessment(self, payload: AssessmentPayload) -> Any:
        """Posts the assessment once and returns the decoded response body.

        Raises:
            Exception: Transport errors or non-2xx statuses.
        """
        pass

    async def aclose(self) -> None:
        """Releases underlying resources. Default is a no-op."""
        pass
