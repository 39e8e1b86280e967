"""Parser that turns OCR lines of a nutrition label into nutrient records."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from label_grader.domain.labels import (
    NO_TEXT_FOUND_MESSAGE,
    NutrientRecord,
    ParseResult,
)

_VALUE_PATTERN = re.compile(r"[\d.]+[,\d]*", re.ASCII)

EXPLICIT_UNITS = frozenset({"kcal", "mg"})
DEFAULT_GRAM_NUTRIENTS = frozenset(
    {
        "protein",
        "total carbohydrate",
        "of which sugars",
        "total fat",
        "saturated fat",
        "trans fat",
        "fibre",
    }
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelParser:
    """Positional parser for single-column "per 100g" nutrition tables.

    Lines above the value-column header are nutrient names (and standalone
    unit lines), lines below it are numeric values. Names and values are
    paired strictly by index, so the OCR lines must keep the label's
    vertical row order.
    """

    value_column_header: str = "Per 100g"
    banner_marker: str = "NUTRITIONAL INFORMATION"

    def parse(self, lines: Sequence[str]) -> ParseResult:
        """Parse the ordered OCR lines of one label image."""
        cleaned = self._clean(lines)
        header_index = _find_header(cleaned, self.value_column_header)
        if header_index is None:
            _logger.error(
                "'%s' not found. Cannot parse nutrients.", self.value_column_header
            )
            return ParseResult.header_missing()

        values = _extract_values(cleaned[header_index + 1 :])
        names, explicit_units = _split_names_and_units(cleaned[:header_index])
        _logger.debug("Identified names: %s", names)
        _logger.debug("Identified explicit units: %s", explicit_units)
        _logger.debug("Identified values (raw): %s", values)

        records: list[NutrientRecord] = []
        report_lines: list[str] = []
        for name, raw_value in zip(names, values):
            value = _to_float(raw_value)
            unit = resolve_unit(name, explicit_units)
            if unit or name.lower() == "energy":
                records.append(NutrientRecord(name=name, value=value, unit=unit))
            report_lines.append(f"{name}: {value} {unit}")

        report = "\n".join(report_lines)
        if report_lines:
            report += "\n"
        if len(names) != len(values):
            message = (
                f"Mismatch in names count ({len(names)}) "
                f"and values count ({len(values)})"
            )
            _logger.warning(message)
            report += f"\n({message})\n"

        report = report.strip()
        return ParseResult(
            records=tuple(records),
            report_text=report or NO_TEXT_FOUND_MESSAGE,
            mismatch_count=abs(len(names) - len(values)),
            header_found=True,
        )

    def _clean(self, lines: Sequence[str]) -> list[str]:
        """Trim lines and drop blanks and the banner line."""
        marker = self.banner_marker.lower()
        cleaned = []
        for line in lines:
            stripped = line.strip()
            if not stripped or marker in stripped.lower():
                continue
            cleaned.append(stripped)
        return cleaned


def resolve_unit(name: str, explicit_units: Sequence[str]) -> str:
    """Return the unit for a row name; the first matching rule wins."""
    lower_name = name.lower()
    lower_units = {unit.lower() for unit in explicit_units}
    if lower_name == "energy" and "kcal" in lower_units:
        return "kcal"
    if lower_name == "sodium" and "mg" in lower_units:
        return "mg"
    if lower_name in DEFAULT_GRAM_NUTRIENTS:
        return "g"
    return ""


def is_value_line(line: str) -> bool:
    """Return True when a line looks like a numeric label value."""
    return _VALUE_PATTERN.fullmatch(line) is not None


def _find_header(lines: list[str], header: str) -> int | None:
    target = header.lower()
    for index, line in enumerate(lines):
        if line.lower() == target:
            return index
    return None


def _extract_values(lines: list[str]) -> list[str]:
    """Keep numeric lines with commas removed, in order."""
    values = []
    for line in lines:
        if is_value_line(line):
            values.append(line.replace(",", ""))
        else:
            _logger.warning("Non-numeric line found in values section: %s", line)
    return values


def _split_names_and_units(lines: list[str]) -> tuple[list[str], list[str]]:
    names: list[str] = []
    explicit_units: list[str] = []
    units_started = False
    for line in lines:
        if line.lower() in EXPLICIT_UNITS:
            units_started = True
            explicit_units.append(line)
            continue
        if units_started:
            _logger.warning(
                "Found non-unit line '%s' after explicit units block started. "
                "Treating as a name.",
                line,
            )
        names.append(line)
    return names, explicit_units


def _to_float(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        return 0.0
