"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from label_grader.adapters.image_fetch_client import (
    HttpxImageFetchClient,
    parse_allowed_hosts,
)
from label_grader.adapters.openai_ocr_client import OpenAIOcrClient
from label_grader.config import Settings
from label_grader.services.analysis import LabelAnalysisService
from label_grader.services.label_parser import LabelParser
from label_grader.services.nutri_score import NutriScoreEngine
from label_grader.services.ocr import OcrService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: LabelAnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    parser = LabelParser(
        value_column_header=resolved_settings.value_column_header,
        banner_marker=resolved_settings.banner_marker,
    )
    image_fetch_client = HttpxImageFetchClient.create(
        timeout_seconds=resolved_settings.image_fetch_timeout_seconds,
        max_bytes=resolved_settings.image_max_bytes,
        allowed_hosts=parse_allowed_hosts(resolved_settings.image_allowed_hosts),
    )
    openai_client: OpenAIOcrClient | None = None
    ocr_service: OcrService | None = None
    if resolved_settings.openai_api_key:
        openai_client = OpenAIOcrClient.create(resolved_settings.openai_api_key)
        ocr_service = OcrService(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    analysis_service = LabelAnalysisService(
        parser=parser,
        engine=NutriScoreEngine(),
        ocr_service=ocr_service,
        image_fetch_client=image_fetch_client,
    )

    async def close_resources() -> None:
        await image_fetch_client.close()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
