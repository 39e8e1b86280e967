"""Models for text recognition results."""

from pydantic import BaseModel


class RecognizedText(BaseModel):
    """Structured output of text recognition for one label image."""

    lines: list[str]
