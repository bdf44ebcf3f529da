"""HTTP 接口测试：验证精炼、缓存运维、健康检查与请求 ID 透传。"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from refiner.api.v1.refine import _service
from refiner.application.container import shutdown_container_resources
from refiner.application.results import InputError, RefineOutcome
from refiner.config import get_settings
from refiner.domain.patterns import PATTERN_LIBRARY_VERSION


@pytest.fixture(scope="module")
def client(tmp_path_factory: pytest.TempPathFactory) -> Iterator[TestClient]:
    with pytest.MonkeyPatch.context() as patch:
        patch.setenv("ST_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
        patch.setenv("ST_CACHE_MAX_SIZE", "20")
        get_settings.cache_clear()
        shutdown_container_resources()
        from refiner.main import app

        with TestClient(app) as test_client:
            yield test_client
    get_settings.cache_clear()


def test_refine_returns_report_and_caches(client: TestClient) -> None:
    body = {"prompt": "create user authentication"}
    first = client.post("/api/v1/refine", json=body)
    assert first.status_code == 200
    payload = first.json()
    assert payload["cached"] is False
    assert payload["report"]["transformation"]["spec"]["intent"] == "generate_code"
    assert payload["report"]["transformation"]["spec"]["io"]["format"] == "markdown"
    assert payload["report"]["transformation"]["processingInfo"]["patternLibraryVersion"] == PATTERN_LIBRARY_VERSION
    assert "IMPROVED PROMPT" in payload["text"]

    second = client.post("/api/v1/refine", json=body)
    assert second.status_code == 200
    assert second.json()["cached"] is True
    assert second.json()["text"] == payload["text"]


def test_refine_accepts_camel_case_flags(client: TestClient) -> None:
    response = client.post(
        "/api/v1/refine",
        json={"prompt": "Summarize the design doc in 200 words", "domain": "docs", "includeValidation": False},
    )
    assert response.status_code == 200
    report = response.json()["report"]
    assert "validation" not in report
    assert report["transformation"]["spec"]["constraints"] == ["max 200 words"]


@pytest.mark.parametrize(
    ("body", "code"),
    [
        ({"prompt": ""}, "TOO_SHORT"),
        ({"prompt": 42}, "INVALID_TYPE"),
        ({"prompt": "create user authentication", "domain": "finance"}, "INVALID_DOMAIN"),
        ({"prompt": "create user authentication", "include_improvements": "no"}, "INVALID_TYPE"),
    ],
)
def test_refine_input_errors_return_400(client: TestClient, body: dict, code: str) -> None:
    response = client.post("/api/v1/refine", json=body)
    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == code
    assert {"error", "expected", "received", "fix", "text"} <= set(payload)
    assert "Input Validation Error" in payload["text"]


def test_cache_stats_and_cleanup(client: TestClient) -> None:
    client.post("/api/v1/refine", json={"prompt": "list the open incidents"})
    stats = client.get("/api/v1/cache/stats")
    assert stats.status_code == 200
    payload = stats.json()
    assert payload["max_size"] == 20
    assert payload["size"] >= 1
    assert "Cache Statistics" in payload["text"]

    cleanup = client.post("/api/v1/cache/cleanup")
    assert cleanup.status_code == 200
    assert cleanup.json()["removed"] == 0
    assert "Cache Cleanup Complete" in cleanup.json()["text"]


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/healthz").json() == {"status": "ok"}


def test_request_id_is_propagated(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Request-Id": "req-42"})
    assert response.headers["X-Request-Id"] == "req-42"
    generated = client.get("/health")
    assert generated.headers["X-Request-Id"]


def test_outcome_without_report_maps_to_error_status(client: TestClient) -> None:
    """服务端未给出报告时按错误类型映射状态码，不会把空报告当成功返回。"""
    class _StubService:
        def __init__(self, outcome: RefineOutcome) -> None:
            self._outcome = outcome

        def refine(self, *_args: object, **_kwargs: object) -> RefineOutcome:
            return self._outcome

    input_error = InputError(code="TOO_SHORT", message="bad", expected="x", received="y", fix="z")
    cases = [
        (RefineOutcome(text="rejected", error=input_error), 400, "TOO_SHORT"),
        (RefineOutcome(text="no report"), 500, None),
    ]
    app = client.app
    try:
        for outcome, status_code, code in cases:
            stub = _StubService(outcome)
            app.dependency_overrides[_service] = lambda: stub
            response = client.post("/api/v1/refine", json={"prompt": "create user authentication"})
            assert response.status_code == status_code
            assert response.json().get("code") == code
            assert response.json()["text"] == outcome.text
    finally:
        app.dependency_overrides.pop(_service, None)
