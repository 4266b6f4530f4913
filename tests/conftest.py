import pytest
from typer.testing import CliRunner
from typing import Any, Dict, List, Optional

import httpx

from triagecli.domain.interfaces.patient_api import PatientApi
from triagecli.infrastructure.config import settings
from triagecli.infrastructure.resilience.api_retry import ApiRetryService
from triagecli.infrastructure.resilience.rate_limiter import RateLimiter


class FakePatientApi(PatientApi):
    """In-memory PatientApi serving canned pages and recording every call."""

    def __init__(
        self,
        pages: Optional[List[Any]] = None,
        list_errors: Optional[List[Exception]] = None,
        submit_response: Any = None,
        submit_error: Optional[Exception] = None,
    ):
        self.pages = pages or []
        self.list_errors = list(list_errors or [])
        self.submit_response = submit_response if submit_response is not None else {"ok": True}
        self.submit_error = submit_error
        self.list_calls: List[tuple] = []
        self.submit_calls: List[Dict[str, Any]] = []
        self.closed = False

    async def list_patients(self, page: int, limit: int) -> Any:
        self.list_calls.append((page, limit))
        if self.list_errors:
            raise self.list_errors.pop(0)
        return self.pages[page - 1]

    async def submit_assessment(self, payload) -> Any:
        self.submit_calls.append(dict(payload))
        if self.submit_error:
            raise self.submit_error
        return self.submit_response

    async def aclose(self) -> None:
        self.closed = True


def _make_http_error(status: int, body: Any = None, method: str = "GET", url: str = "https://api.test/patients"):
    request = httpx.Request(method, url)
    response = httpx.Response(status, json=body, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


def _make_page(records: List[Dict[str, Any]], has_next: bool, batch_field: str = "data", page_info_field: str = "pagination"):
    return {batch_field: records, page_info_field: {"hasNext": has_next}}


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def fake_api_cls():
    return FakePatientApi


@pytest.fixture
def http_error():
    """Factory for httpx.HTTPStatusError instances with a real response attached."""
    return _make_http_error


@pytest.fixture
def listing_page():
    """Factory for listing payloads in the default {'data', 'pagination'} shape."""
    return _make_page


@pytest.fixture
def fast_retry_service():
    """ApiRetryService with no limiter spacing and no backoff delay."""
    def factory(max_retries: int = 5) -> ApiRetryService:
        return ApiRetryService(
            rate_limiter=RateLimiter(min_interval=0.0),
            max_retries=max_retries,
            initial_backoff_s=0.0,
        )
    return factory


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps tests independent of the developer's environment and config files."""
    for var in ("BASE_URL", "X_API_KEY", "CF_PROXY_URL", "API_BASE_URL", "API_KEY", "API_PROXY_URL",
                "API_PAGE_SIZE", "LOGGING_LEVEL", "LOGGING_FILE"):
        # setenv first so teardown also removes values a loaded .env adds
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
