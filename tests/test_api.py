"""Tests for the label analysis API."""

import httpx
from fastapi.testclient import TestClient

from label_grader.adapters.image_fetch_client import (
    HttpxImageFetchClient,
    ImageRejectedError,
    ImageTooLargeError,
)
from label_grader.api.app import create_app
from label_grader.config import Settings
from label_grader.containers import AppContainer
from label_grader.services.analysis import LabelAnalysisService
from label_grader.services.label_parser import LabelParser
from label_grader.services.nutri_score import NutriScoreEngine
from tests.conftest import SAMPLE_LABEL_LINES, FakeImageFetchClient, FakeOcrClient


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_lines_returns_grade(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/analyze", json={"lines": SAMPLE_LABEL_LINES})

    assert response.status_code == 200
    data = response.json()
    assert data["header_found"] is True
    assert data["score"] == -2
    assert data["grade"] == "A"
    assert data["badge"] == {"background": "#038141", "text_color": "#FFFFFF"}
    assert data["records"][0] == {"name": "Energy", "value": 250.0, "unit": "kcal"}
    assert data["points"]["negative"] == 5
    assert data["report_text"].startswith("Energy: 250.0 kcal")


def test_analyze_lines_without_header_is_not_applicable(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/analyze", json={"lines": ["Energy", "250"]})

    assert response.status_code == 200
    data = response.json()
    assert data["header_found"] is False
    assert data["records"] == []
    assert data["score"] is None
    assert data["points"] is None
    assert data["grade"] == "N/A"
    assert data["report_text"] == "value-column header not found"


def test_analyze_lines_rejects_empty_list(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/analyze", json={"lines": []})

    assert response.status_code == 422


def test_scan_image_body(container, ocr_client: FakeOcrClient) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/labels/scan",
        content=b"\x89PNG\r\n\x1a\nimage",
        headers={"Content-Type": "image/png"},
    )

    assert response.status_code == 200
    assert response.json()["grade"] == "A"
    assert ocr_client.calls


def test_scan_image_rejects_empty_body(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/scan", content=b"")

    assert response.status_code == 400


def test_scan_image_reports_ocr_failure(container, ocr_client: FakeOcrClient) -> None:
    ocr_client.error = RuntimeError("service down")
    client = TestClient(create_app(container))

    response = client.post("/labels/scan", content=b"image")

    assert response.status_code == 502
    assert response.json()["detail"] == "Text recognition failed"


def test_scan_image_without_ocr_backend(settings) -> None:
    async def close_resources() -> None:
        return None

    container = AppContainer(
        settings=settings,
        analysis_service=LabelAnalysisService(
            parser=LabelParser(), engine=NutriScoreEngine()
        ),
        close_resources=close_resources,
    )
    client = TestClient(create_app(container))

    response = client.post("/labels/scan", content=b"image")

    assert response.status_code == 503


def test_scan_url(container, image_fetch_client: FakeImageFetchClient) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/labels/scan-url", json={"url": "https://example.com/label.jpg"}
    )

    assert response.status_code == 200
    assert response.json()["score"] == -2
    assert image_fetch_client.urls == ["https://example.com/label.jpg"]


def test_scan_url_rejects_malformed_url(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/scan-url", json={"url": "not a url"})

    assert response.status_code == 422


def test_scan_url_rejects_non_http_scheme(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/labels/scan-url", json={"url": "file:///etc/passwd"})

    assert response.status_code == 422


def test_scan_url_with_invalid_characters_is_a_client_error(
    settings, analysis_service: LabelAnalysisService
) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x"))
    analysis_service.image_fetch_client = HttpxImageFetchClient(
        http_client=httpx.AsyncClient(transport=transport)
    )
    client = TestClient(create_app(_container(settings, analysis_service)))

    response = client.post(
        "/labels/scan-url", json={"url": "https://exa\x00mple.com/x.png"}
    )

    assert response.status_code in {400, 422}


def test_scan_url_maps_rejected_image_to_bad_request(
    container, image_fetch_client: FakeImageFetchClient
) -> None:
    image_fetch_client.error = ImageRejectedError("Image host not allowed: evil.test")
    client = TestClient(create_app(container))

    response = client.post("/labels/scan-url", json={"url": "https://evil.test/x.png"})

    assert response.status_code == 400
    assert "not allowed" in response.json()["detail"]


def test_scan_url_maps_oversize_image(
    container, image_fetch_client: FakeImageFetchClient
) -> None:
    image_fetch_client.error = ImageTooLargeError("Image exceeds the size limit")
    client = TestClient(create_app(container))

    response = client.post(
        "/labels/scan-url", json={"url": "https://example.com/huge.png"}
    )

    assert response.status_code == 413


def test_scan_url_maps_download_failure(
    settings, analysis_service: LabelAnalysisService
) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    analysis_service.image_fetch_client = HttpxImageFetchClient(
        http_client=httpx.AsyncClient(transport=transport)
    )
    client = TestClient(create_app(_container(settings, analysis_service)))

    response = client.post(
        "/labels/scan-url", json={"url": "https://example.com/missing.png"}
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "Image download failed"


def test_scan_image_rejects_oversize_body(analysis_service) -> None:
    settings = Settings(openai_api_key="openai-key", image_max_bytes=8)
    client = TestClient(create_app(_container(settings, analysis_service)))

    response = client.post("/labels/scan", content=b"x" * 64)

    assert response.status_code == 413


def _container(
    settings: Settings, analysis_service: LabelAnalysisService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
