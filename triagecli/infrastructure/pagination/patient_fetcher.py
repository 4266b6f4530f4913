"""Fetches every patient from the paginated listing endpoint.

The upstream API is known to drift between response shapes, so each page is
run through ``normalize_page`` which either yields a ``PageBatch`` or an
``UnrecognizedPayload``. An unrecognized page stops the run instead of being
skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from triagecli.domain.events.api_events import PageFetched
from triagecli.domain.interfaces.patient_api import PatientApi
from triagecli.domain.models.errors import UnrecognizedPayloadError
from triagecli.domain.models.patient import PatientRecord
from triagecli.infrastructure.resilience.api_retry import ApiRetryService, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

BATCH_FIELDS: Tuple[str, ...] = ("data", "patients")
PAGE_INFO_FIELDS: Tuple[str, ...] = ("pagination", "pageInfo", "page_info")
HAS_NEXT_FIELDS: Tuple[str, ...] = ("hasNext", "has_next")


@dataclass(frozen=True)
class PageBatch:
    records: List[PatientRecord]
    has_next: bool


@dataclass(frozen=True)
class UnrecognizedPayload:
    page: int
    reason: str


PageResult = Union[PageBatch, UnrecognizedPayload]


def _first_present(payload: Mapping[str, Any], fields: Tuple[str, ...]) -> Any:
    for name in fields:
        value = payload.get(name)
        if value is not None:
            return value
    return None


def _has_next_page(payload: Mapping[str, Any]) -> bool:
    page_info = _first_present(payload, PAGE_INFO_FIELDS)
    if not isinstance(page_info, Mapping):
        return False
    explicit = _first_present(page_info, HAS_NEXT_FIELDS)
    if explicit is not None:
        return bool(explicit)
    return page_info.get("next") is not None


def normalize_page(payload: Any, page: int) -> PageResult:
    """Resolves a listing response into records plus a continuation flag."""
    if not isinstance(payload, Mapping):
        return UnrecognizedPayload(page, f"expected a JSON object, got {type(payload).__name__}")

    batch: Optional[list] = None
    for name in BATCH_FIELDS:
        if isinstance(payload.get(name), list):
            batch = payload[name]
            break
    if batch is None:
        return UnrecognizedPayload(page, f"no patient list under any of {list(BATCH_FIELDS)}")

    records: List[PatientRecord] = []
    for index, item in enumerate(batch):
        if not isinstance(item, Mapping):
            return UnrecognizedPayload(page, f"item {index} is not an object")
        try:
            records.append(PatientRecord.from_payload(item))
        except KeyError:
            return UnrecognizedPayload(page, f"item {index} has no patient_id")

    return PageBatch(records=records, has_next=_has_next_page(payload))


class PatientFetcher:
    """Walks the listing endpoint page by page until no next page exists."""

    def __init__(
        self,
        api: PatientApi,
        retry_service: ApiRetryService,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.api = api
        self.retry_service = retry_service
        self.page_size = page_size

    async def fetch_page(self, page: int) -> PageBatch:
        payload = await self.retry_service.execute_with_retry(
            self.api.list_patients,
            page=page,
            limit=self.page_size,
            endpoint_name=f"list_patients[page={page}]",
        )
        result = normalize_page(payload, page)
        if isinstance(result, UnrecognizedPayload):
            logger.error(f"Unrecognised payload on page {page}: {result.reason}")
            raise UnrecognizedPayloadError(page, result.reason, payload)
        dispatch_event(PageFetched(page=page, record_count=len(result.records), has_next=result.has_next))
        return result

    async def fetch_all(self) -> List[PatientRecord]:
        """Returns every patient in page-arrival order.

        Raises:
            UnrecognizedPayloadError: A page had no recognizable batch.
            MaxRetryError: A page kept failing with transient errors.
            httpx.HTTPStatusError: A page failed with a fatal status.
        """
        page = 1
        patients: List[PatientRecord] = []
        seen_ids = set()

        while True:
            batch = await self.fetch_page(page)
            for record in batch.records:
                if record.patient_id in seen_ids:
                    logger.warning(f"Duplicate patient_id {record.patient_id} on page {page}")
                seen_ids.add(record.patient_id)
            patients.extend(batch.records)
            logger.info(f"Fetched page {page}: {len(batch.records)} patients ({len(patients)} total)")
            if not batch.has_next:
                break
            page += 1

        logger.info(f"Fetched {len(patients)} patients across {page} page(s)")
        return patients
