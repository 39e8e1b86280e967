"""Display rule for Nutri-Score grade badges."""

from label_grader.domain.scoring import NOT_APPLICABLE, GradeBadge

GRADE_COLORS = {
    "A": "#038141",
    "B": "#85BB2F",
    "C": "#FECB02",
    "D": "#EE8100",
    "E": "#E63E11",
}
TRANSPARENT = "transparent"
DARK_TEXT = "#000000"
LIGHT_TEXT = "#FFFFFF"


def grade_badge(grade: str | None) -> GradeBadge:
    """Return the badge colours for a grade; ``None`` means not applicable."""
    label = grade or NOT_APPLICABLE
    background = GRADE_COLORS.get(label, TRANSPARENT)
    text_color = DARK_TEXT if label == "C" else LIGHT_TEXT
    return GradeBadge(label=label, background=background, text_color=text_color)
