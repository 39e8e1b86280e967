"""Domain models for parsed nutrition labels."""

from dataclasses import dataclass, field

HEADER_NOT_FOUND_MESSAGE = "value-column header not found"
NO_TEXT_FOUND_MESSAGE = "no text found"


@dataclass(frozen=True)
class NutrientRecord:
    """A single named, valued and unit-tagged row of a label."""

    name: str
    value: float
    unit: str


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing the OCR lines of one label image."""

    records: tuple[NutrientRecord, ...] = field(default_factory=tuple)
    report_text: str = ""
    mismatch_count: int = 0
    header_found: bool = True

    @classmethod
    def header_missing(cls) -> "ParseResult":
        """Return the fixed result used when the value-column header is absent."""
        return cls(
            records=(),
            report_text=HEADER_NOT_FOUND_MESSAGE,
            mismatch_count=0,
            header_found=False,
        )
