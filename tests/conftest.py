"""Shared test fixtures."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from label_grader.adapters.image_fetch_client import ImageFetchClient
from label_grader.config import Settings
from label_grader.containers import AppContainer
from label_grader.services.analysis import LabelAnalysisService
from label_grader.services.label_parser import LabelParser
from label_grader.services.nutri_score import NutriScoreEngine
from label_grader.services.ocr import OcrClient, OcrService

SAMPLE_LABEL_LINES = [
    "NUTRITIONAL INFORMATION",
    "Energy",
    "Protein",
    "Total Carbohydrate",
    "of which Sugars",
    "Total Fat",
    "Saturated Fat",
    "Trans Fat",
    "Fibre",
    "Sodium",
    "kcal",
    "mg",
    "Per 100g",
    "250",
    "7",
    "30",
    "5",
    "12",
    "1",
    "0",
    "3",
    "100",
]


@dataclass
class FakeOcrClient(OcrClient):
    """Fake OCR client returning fixed lines."""

    payload: object = field(
        default_factory=lambda: {"lines": list(SAMPLE_LABEL_LINES)}
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def recognize(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        self.calls.append({"model": model, "image_data_url": image_data_url})
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeImageFetchClient(ImageFetchClient):
    """Fake image client that returns static bytes."""

    content: bytes = b"\x89PNG\r\n\x1a\nfake-image"
    urls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def fetch_image_bytes(self, url: str) -> bytes:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def ocr_client() -> FakeOcrClient:
    return FakeOcrClient()


@pytest.fixture
def image_fetch_client() -> FakeImageFetchClient:
    return FakeImageFetchClient()


@pytest.fixture
def analysis_service(
    settings: Settings,
    ocr_client: FakeOcrClient,
    image_fetch_client: FakeImageFetchClient,
) -> LabelAnalysisService:
    return LabelAnalysisService(
        parser=LabelParser(),
        engine=NutriScoreEngine(),
        ocr_service=OcrService(
            client=ocr_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        image_fetch_client=image_fetch_client,
    )


@pytest.fixture
def container(
    settings: Settings, analysis_service: LabelAnalysisService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )


@pytest.fixture
def app_logs(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> Iterator[pytest.LogCaptureFixture]:
    """Capture records from the application logger even when it does not propagate."""
    logger = logging.getLogger("label_grader")
    monkeypatch.setattr(logger, "propagate", False)
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="label_grader")
    yield caplog
    logger.removeHandler(caplog.handler)
