"""Run-scoped collaborators shared by the fetch and submission steps.

Built once by the composition root (main.create_dependencies) so that tests
can assemble the same pipeline around fake APIs and limiters.
"""

from dataclasses import dataclass

from triagecli.domain.interfaces.patient_api import PatientApi
from triagecli.infrastructure.pagination.patient_fetcher import DEFAULT_PAGE_SIZE
from triagecli.infrastructure.resilience.api_retry import ApiRetryService
from triagecli.infrastructure.resilience.rate_limiter import RateLimiter


@dataclass
class PipelineContext:
    api: PatientApi
    rate_limiter: RateLimiter
    retry_service: ApiRetryService
    page_size: int = DEFAULT_PAGE_SIZE
