"""Label analysis pipeline shared by every capture path."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from label_grader.adapters.image_fetch_client import ImageFetchClient
from label_grader.domain.labels import ParseResult
from label_grader.domain.scoring import GradeBadge, ScoreResult
from label_grader.services.badge import grade_badge
from label_grader.services.label_parser import LabelParser
from label_grader.services.nutri_score import NutriScoreEngine
from label_grader.services.ocr import OcrService

_logger = logging.getLogger(__name__)


class OcrUnavailableError(RuntimeError):
    """Raised when an image is submitted but no OCR backend is configured."""


@dataclass(frozen=True)
class LabelAnalysis:
    """Parsed label, its score (if the label could be parsed) and badge."""

    parse: ParseResult
    score: ScoreResult | None
    badge: GradeBadge


@dataclass
class LabelAnalysisService:
    """Runs OCR lines through the label parser and the Nutri-Score engine."""

    parser: LabelParser
    engine: NutriScoreEngine
    ocr_service: OcrService | None = None
    image_fetch_client: ImageFetchClient | None = None

    def analyze_lines(self, lines: Sequence[str]) -> LabelAnalysis:
        """Parse OCR lines and score them unless the label structure is missing."""
        parsed = self.parser.parse(lines)
        if not parsed.header_found:
            return LabelAnalysis(parse=parsed, score=None, badge=grade_badge(None))
        score = self.engine.score(parsed.records)
        _logger.info(
            "Label scored: records=%s score=%s grade=%s",
            len(parsed.records),
            score.total_points,
            score.grade,
        )
        return LabelAnalysis(
            parse=parsed, score=score, badge=grade_badge(score.grade)
        )

    async def analyze_image(self, image_bytes: bytes) -> LabelAnalysis:
        """Recognize text in a still image and analyze it."""
        if self.ocr_service is None:
            raise OcrUnavailableError("Text recognition is not configured")
        lines = await self.ocr_service.recognize_lines(image_bytes)
        _logger.debug("All raw lines from OCR:\n%s", "\n".join(lines))
        return self.analyze_lines(lines)

    async def analyze_image_url(self, url: str) -> LabelAnalysis:
        """Download a label image and analyze it."""
        if self.ocr_service is None or self.image_fetch_client is None:
            raise OcrUnavailableError("Text recognition is not configured")
        image_bytes = await self.image_fetch_client.fetch_image_bytes(url)
        return await self.analyze_image(image_bytes)
