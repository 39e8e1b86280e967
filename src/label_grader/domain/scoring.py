"""Nutri-Score domain models."""

from dataclasses import dataclass

GRADES = ("A", "B", "C", "D", "E")
NOT_APPLICABLE = "N/A"


@dataclass(frozen=True)
class NutriScoreInputs:
    """Per-100g values extracted from nutrient records.

    ``None`` means the nutrient was not found on the label, which is scored
    differently from an explicit zero.
    """

    energy_kj: float | None
    sugars_g: float | None
    saturated_fat_g: float | None
    sodium_mg: float | None
    fibre_g: float | None
    protein_g: float | None
    fvlno_percent: float = 0.0


@dataclass(frozen=True)
class PointBreakdown:
    """Points awarded by each table plus the combined totals."""

    energy: int
    sugars: int
    saturated_fat: int
    sodium: int
    fvlno: int
    fibre: int
    protein: int
    protein_counted: bool

    @property
    def negative(self) -> int:
        return self.energy + self.sugars + self.saturated_fat + self.sodium

    @property
    def positive(self) -> int:
        total = self.fvlno + self.fibre
        if self.protein_counted:
            total += self.protein
        return total


@dataclass(frozen=True)
class ScoreResult:
    """Numeric Nutri-Score and its letter grade."""

    total_points: int
    grade: str
    points: PointBreakdown
    inputs: NutriScoreInputs


@dataclass(frozen=True)
class GradeBadge:
    """Display colours for a grade badge."""

    label: str
    background: str
    text_color: str
