"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request, status

from label_grader.adapters.image_fetch_client import (
    ImageRejectedError,
    ImageTooLargeError,
)
from label_grader.api.models import (
    AnalyzeLinesRequest,
    LabelAnalysisResponse,
    ScanUrlRequest,
)
from label_grader.app_logging import configure_logging
from label_grader.containers import AppContainer
from label_grader.services.analysis import LabelAnalysis, OcrUnavailableError
from label_grader.services.ocr import OcrError

PAYLOAD_TOO_LARGE = 413


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/labels/analyze")
    async def analyze_lines(
        payload: AnalyzeLinesRequest, request: Request
    ) -> LabelAnalysisResponse:
        """Analyze OCR lines supplied by the caller."""
        state_container: AppContainer = request.app.state.container
        analysis = state_container.analysis_service.analyze_lines(payload.lines)
        return LabelAnalysisResponse.from_analysis(analysis)

    @app.post("/labels/scan")
    async def scan_image(request: Request) -> LabelAnalysisResponse:
        """Recognize and analyze a label image sent as the request body."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await _read_limited_body(
            request, state_container.settings.image_max_bytes
        )
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image body"
            )
        analysis = await _run_image_analysis(
            lambda: state_container.analysis_service.analyze_image(image_bytes),
            logger,
        )
        return LabelAnalysisResponse.from_analysis(analysis)

    @app.post("/labels/scan-url")
    async def scan_image_url(
        payload: ScanUrlRequest, request: Request
    ) -> LabelAnalysisResponse:
        """Download, recognize and analyze a label image."""
        state_container: AppContainer = request.app.state.container
        analysis = await _run_image_analysis(
            lambda: state_container.analysis_service.analyze_image_url(
                str(payload.url)
            ),
            logger,
        )
        return LabelAnalysisResponse.from_analysis(analysis)

    return app


async def _run_image_analysis(
    run: Callable[[], Awaitable[LabelAnalysis]], logger: logging.Logger
) -> LabelAnalysis:
    """Await an image analysis and map collaborator failures to HTTP errors."""
    try:
        return await run()
    except OcrUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except OcrError as exc:
        logger.exception("Text recognition failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Text recognition failed"
        ) from exc
    except ImageTooLargeError as exc:
        raise HTTPException(
            status_code=PAYLOAD_TOO_LARGE, detail=str(exc)
        ) from exc
    except ImageRejectedError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except httpx.HTTPError as exc:
        logger.warning("Image download failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Image download failed"
        ) from exc


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, rejecting it once it exceeds ``max_bytes``."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise HTTPException(
            status_code=PAYLOAD_TOO_LARGE,
            detail="Image exceeds the size limit",
        )
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise HTTPException(
                status_code=PAYLOAD_TOO_LARGE,
                detail="Image exceeds the size limit",
            )
    return bytes(body)
