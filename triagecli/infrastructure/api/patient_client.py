"""Concrete implementation of the PatientApi interface over HTTP.

Uses httpx.AsyncClient. Does no retrying of its own: non-2xx statuses are
raised as httpx.HTTPStatusError and left to the caller to classify.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from triagecli.domain.interfaces.patient_api import PatientApi
from triagecli.domain.models.common import AssessmentPayload
from triagecli.domain.models.errors import decode_body

logger = logging.getLogger(__name__)

PATIENTS_PATH = "/patients"
SUBMIT_PATH = "/submit-assessment"
DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpPatientApi(PatientApi):
    """httpx implementation of the PatientApi interface."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the HTTP client.

        Args:
            base_url: API root, e.g. https://host/api.
            headers: Default headers (auth) sent with every request.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        if not base_url:
            raise ValueError("Patient API base URL not provided.")
        # httpx joins relative paths onto the base path only with a trailing slash
        self.base_url = base_url.rstrip("/") + "/"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers or {},
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"HttpPatientApi initialized for {self.base_url}")

    async def list_patients(self, page: int, limit: int) -> Any:
        response = await self.client.get(PATIENTS_PATH.lstrip("/"), params={"page": page, "limit": limit})
        logger.debug(f"GET {response.request.url} -> {response.status_code}")
        response.raise_for_status()
        return decode_body(response)

    async def submit_assessment(self, payload: AssessmentPayload) -> Any:
        response = await self.client.post(SUBMIT_PATH.lstrip("/"), json=dict(payload))
        logger.debug(f"POST {response.request.url} -> {response.status_code}")
        response.raise_for_status()
        return decode_body(response)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpPatientApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
