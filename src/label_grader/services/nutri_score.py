"""Nutri-Score calculation for general foods."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from label_grader.domain.labels import NutrientRecord
from label_grader.domain.scoring import (
    NutriScoreInputs,
    PointBreakdown,
    ScoreResult,
)

KCAL_TO_KJ = 4.184
PROTEIN_CAP_THRESHOLD = 11
MAX_FVLNO_POINTS = 5

# (exclusive lower bound, points), highest band first.
ENERGY_KJ_BANDS = (
    (3350, 10),
    (3015, 9),
    (2680, 8),
    (2345, 7),
    (2010, 6),
    (1675, 5),
    (1340, 4),
    (1005, 3),
    (670, 2),
    (335, 1),
)
SUGARS_G_BANDS = (
    (45, 10),
    (40, 9),
    (36, 8),
    (31, 7),
    (27, 6),
    (22.5, 5),
    (18, 4),
    (13.5, 3),
    (9, 2),
    (4.5, 1),
)
SATURATED_FAT_G_BANDS = (
    (10, 10),
    (9, 9),
    (8, 8),
    (7, 7),
    (6, 6),
    (5, 5),
    (4, 4),
    (3, 3),
    (2, 2),
    (1, 1),
)
SODIUM_MG_BANDS = (
    (900, 10),
    (810, 9),
    (720, 8),
    (630, 7),
    (540, 6),
    (450, 5),
    (360, 4),
    (270, 3),
    (180, 2),
    (90, 1),
)
FIBRE_G_BANDS = ((4.7, 5), (3.7, 4), (2.8, 3), (1.9, 2), (0.9, 1))
PROTEIN_G_BANDS = ((8.0, 5), (6.4, 4), (4.8, 3), (3.2, 2), (1.6, 1))
FVLNO_PERCENT_BANDS = ((80, 5), (60, 2), (40, 1))

# (inclusive upper bound, grade); anything above the last bound is "E".
GRADE_BOUNDS = ((-1, "A"), (2, "B"), (10, "C"), (18, "D"))

_logger = logging.getLogger(__name__)


def _points(
    value: float | None, bands: tuple[tuple[float, int], ...], missing: int
) -> int:
    if value is None:
        return missing
    for threshold, points in bands:
        if value > threshold:
            return points
    return 0


def energy_points(kj: float | None) -> int:
    return _points(kj, ENERGY_KJ_BANDS, missing=10)


def sugar_points(grams: float | None) -> int:
    return _points(grams, SUGARS_G_BANDS, missing=10)


def saturated_fat_points(grams: float | None) -> int:
    return _points(grams, SATURATED_FAT_G_BANDS, missing=10)


def sodium_points(mg: float | None) -> int:
    return _points(mg, SODIUM_MG_BANDS, missing=10)


def fibre_points(grams: float | None) -> int:
    return _points(grams, FIBRE_G_BANDS, missing=0)


def protein_points(grams: float | None) -> int:
    return _points(grams, PROTEIN_G_BANDS, missing=0)


def fvlno_points(percent: float | None) -> int:
    return _points(percent, FVLNO_PERCENT_BANDS, missing=0)


def grade_for(total_points: int) -> str:
    """Map a total score to its letter grade."""
    for upper_bound, grade in GRADE_BOUNDS:
        if total_points <= upper_bound:
            return grade
    return "E"


def extract_inputs(records: Sequence[NutrientRecord]) -> NutriScoreInputs:
    """Pick the scored nutrients out of parsed records.

    The first record matching each field wins. Energy is converted from kcal
    to kJ. The fruit/vegetable/legume/nut/oil share cannot be read from a
    label, so it is always 0%.
    """
    energy_kcal = _find(records, lambda name: name == "energy", "kcal")
    return NutriScoreInputs(
        energy_kj=energy_kcal * KCAL_TO_KJ if energy_kcal is not None else None,
        sugars_g=_find(records, lambda name: "sugars" in name, "g"),
        saturated_fat_g=_find(records, lambda name: "saturated fat" in name, "g"),
        sodium_mg=_find(records, lambda name: name == "sodium", "mg"),
        fibre_g=_find(records, lambda name: name == "fibre", "g"),
        protein_g=_find(records, lambda name: name == "protein", "g"),
        fvlno_percent=0.0,
    )


def _find(
    records: Sequence[NutrientRecord],
    name_matches: Callable[[str], bool],
    unit: str,
) -> float | None:
    for record in records:
        if name_matches(record.name.lower()) and record.unit.lower() == unit:
            return record.value
    return None


@dataclass(frozen=True)
class NutriScoreEngine:
    """Stateless Nutri-Score calculator for general foods."""

    def score(self, records: Sequence[NutrientRecord]) -> ScoreResult:
        """Compute the total points and letter grade for parsed records."""
        inputs = extract_inputs(records)
        _logger.debug("Nutri-Score inputs: %s", inputs)
        return self.score_inputs(inputs)

    def score_inputs(self, inputs: NutriScoreInputs) -> ScoreResult:
        """Compute the score from already extracted per-100g values."""
        energy = energy_points(inputs.energy_kj)
        sugars = sugar_points(inputs.sugars_g)
        saturated_fat = saturated_fat_points(inputs.saturated_fat_g)
        sodium = sodium_points(inputs.sodium_mg)
        negative = energy + sugars + saturated_fat + sodium

        fvlno = fvlno_points(inputs.fvlno_percent)
        protein_counted = (
            negative < PROTEIN_CAP_THRESHOLD or fvlno < MAX_FVLNO_POINTS
        )
        breakdown = PointBreakdown(
            energy=energy,
            sugars=sugars,
            saturated_fat=saturated_fat,
            sodium=sodium,
            fvlno=fvlno,
            fibre=fibre_points(inputs.fibre_g),
            protein=protein_points(inputs.protein_g),
            protein_counted=protein_counted,
        )
        total = breakdown.negative - breakdown.positive
        _logger.debug(
            "Nutri-Score points: negative=%s positive=%s total=%s",
            breakdown.negative,
            breakdown.positive,
            total,
        )
        return ScoreResult(
            total_points=total,
            grade=grade_for(total),
            points=breakdown,
            inputs=inputs,
        )
