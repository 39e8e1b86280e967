"""Pydantic models for the label analysis API."""

from pydantic import AnyHttpUrl, BaseModel, Field

from label_grader.services.analysis import LabelAnalysis


class AnalyzeLinesRequest(BaseModel):
    """OCR lines of one label, in top-to-bottom order."""

    lines: list[str] = Field(min_length=1)


class ScanUrlRequest(BaseModel):
    """Location of a label image to download and analyze."""

    url: AnyHttpUrl


class NutrientRecordModel(BaseModel):
    """A parsed nutrient row."""

    name: str
    value: float
    unit: str


class BadgeModel(BaseModel):
    """Grade badge colours."""

    background: str
    text_color: str


class PointsModel(BaseModel):
    """Per-table points and totals."""

    energy: int
    sugars: int
    saturated_fat: int
    sodium: int
    fvlno: int
    fibre: int
    protein: int
    protein_counted: bool
    negative: int
    positive: int


class LabelAnalysisResponse(BaseModel):
    """Result of analyzing a label."""

    header_found: bool
    records: list[NutrientRecordModel]
    report_text: str
    mismatch_count: int
    score: int | None
    grade: str
    badge: BadgeModel
    points: PointsModel | None

    @classmethod
    def from_analysis(cls, analysis: LabelAnalysis) -> "LabelAnalysisResponse":
        """Build a response from a label analysis."""
        parsed = analysis.parse
        score = analysis.score
        points = None
        if score is not None:
            breakdown = score.points
            points = PointsModel(
                energy=breakdown.energy,
                sugars=breakdown.sugars,
                saturated_fat=breakdown.saturated_fat,
                sodium=breakdown.sodium,
                fvlno=breakdown.fvlno,
                fibre=breakdown.fibre,
                protein=breakdown.protein,
                protein_counted=breakdown.protein_counted,
                negative=breakdown.negative,
                positive=breakdown.positive,
            )
        return cls(
            header_found=parsed.header_found,
            records=[
                NutrientRecordModel(
                    name=record.name, value=record.value, unit=record.unit
                )
                for record in parsed.records
            ],
            report_text=parsed.report_text,
            mismatch_count=parsed.mismatch_count,
            score=score.total_points if score is not None else None,
            grade=analysis.badge.label,
            badge=BadgeModel(
                background=analysis.badge.background,
                text_color=analysis.badge.text_color,
            ),
            points=points,
        )
