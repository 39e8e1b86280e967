"""Text recognition service for label images."""

import base64
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from label_grader.domain.ocr import RecognizedText

OCR_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "lines": {
            "type": "array",
            "items": {"type": "string"},
        }
    },
    "required": ["lines"],
    "additionalProperties": False,
}

OCR_PROMPT = (
    "Transcribe every line of text on this nutrition label exactly as printed. "
    "Return one entry per printed line, top to bottom, reading each column "
    "fully before the next one. Do not merge, reorder, translate or correct "
    "lines."
)


class OcrError(RuntimeError):
    """Raised when text recognition fails for an image."""


class OcrClient(Protocol):
    """Interface for a text recognition backend."""

    async def recognize(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return recognized text lines for an image."""


@dataclass
class OcrService:
    """Service that turns label image bytes into ordered text lines."""

    client: OcrClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def recognize_lines(self, image_bytes: bytes) -> list[str]:
        """Recognize text lines in an image, preserving their vertical order."""
        try:
            raw = await self.client.recognize(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=_to_data_url(image_bytes),
                schema=OCR_SCHEMA,
                prompt=OCR_PROMPT,
            )
        except OcrError:
            raise
        except Exception as exc:
            raise OcrError("Text recognition failed") from exc
        try:
            recognized = RecognizedText.model_validate(raw)
        except ValidationError as exc:
            raise OcrError("Text recognition returned no lines") from exc
        return recognized.lines


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
