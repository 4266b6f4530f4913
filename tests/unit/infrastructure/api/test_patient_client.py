import asyncio
import json

import httpx
import pytest

from triagecli.infrastructure.api.patient_client import HttpPatientApi


def make_api(handler, **kwargs):
    return HttpPatientApi(
        base_url="https://api.test/api",
        headers={"x-api-key": "secret"},
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_list_patients_sends_page_params_and_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-api-key")
        return httpx.Response(200, json={"data": [], "pagination": {"hasNext": False}})

    async def run():
        async with make_api(handler) as api:
            return await api.list_patients(page=3, limit=20)

    body = asyncio.run(run())

    assert body == {"data": [], "pagination": {"hasNext": False}}
    assert seen["url"] == "https://api.test/api/patients?page=3&limit=20"
    assert seen["key"] == "secret"


def test_list_patients_raises_on_error_status():
    def handler(request):
        return httpx.Response(503, json={"error": "busy"})

    async def run():
        async with make_api(handler) as api:
            await api.list_patients(page=1, limit=20)

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.response.status_code == 503


def test_submit_assessment_posts_json_and_returns_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "results": {"score": 91.5}})

    payload = {"high_risk_patients": ["P1"], "fever_patients": [], "data_quality_issues": ["P2"]}

    async def run():
        async with make_api(handler) as api:
            return await api.submit_assessment(payload)

    body = asyncio.run(run())

    assert body == {"success": True, "results": {"score": 91.5}}
    assert seen == {"method": "POST", "path": "/api/submit-assessment", "body": payload}


def test_non_json_body_is_returned_as_text():
    def handler(request):
        return httpx.Response(200, text="accepted")

    async def run():
        async with make_api(handler) as api:
            return await api.submit_assessment({"high_risk_patients": [], "fever_patients": [], "data_quality_issues": []})

    assert asyncio.run(run()) == "accepted"


def test_base_url_trailing_slash_is_normalized():
    api = make_api(lambda request: httpx.Response(200, json={}))
    assert api.base_url == "https://api.test/api/"
    asyncio.run(api.aclose())


def test_missing_base_url_rejected():
    with pytest.raises(ValueError):
        HttpPatientApi(base_url="")
