"""OpenAI Responses API client for label text recognition."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from label_grader.services.ocr import OcrClient, OcrError

FORMAT_NAME = "label_lines"


@dataclass
class OpenAIOcrClient(OcrClient):
    """OCR client that asks an OpenAI model to transcribe label lines."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIOcrClient":
        """Create an OpenAI OCR client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Transcribe an image into the structured line payload."""
        options: dict[str, object] = {"store": store}
        if reasoning_effort:
            options["reasoning"] = {"effort": reasoning_effort}
        response = await self.client.responses.create(
            model=model,
            input=[_transcription_message(prompt, image_data_url)],
            text={"format": _line_format(schema)},
            **options,
        )
        if getattr(response, "status", None) == "incomplete":
            details = getattr(response, "incomplete_details", None)
            reason = getattr(details, "reason", None) or "unknown"
            raise OcrError(f"OpenAI transcription incomplete: {reason}")
        return _decode_output(response.output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()


def _transcription_message(prompt: str, image_data_url: str) -> dict[str, object]:
    return {
        "role": "user",
        "content": [
            {"type": "input_text", "text": prompt},
            {"type": "input_image", "image_url": image_data_url},
        ],
    }


def _line_format(schema: dict[str, object]) -> dict[str, object]:
    return {
        "type": "json_schema",
        "name": FORMAT_NAME,
        "strict": True,
        "schema": schema,
    }


def _decode_output(output_text: str | None) -> dict[str, object]:
    """Decode the model's JSON output, rejecting empty or non-JSON text."""
    if not output_text:
        raise OcrError("OpenAI returned an empty response")
    try:
        return json.loads(output_text)
    except json.JSONDecodeError as exc:
        raise OcrError("OpenAI returned malformed JSON") from exc
