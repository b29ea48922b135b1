"""Rubric scoring — ten equally weighted 0–10 categories summed to 0–100."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

# (wire name, column name), in display order.
RUBRIC_CATEGORIES = (
    ("innovation", "innovation"),
    ("aiIntegration", "ai_integration"),
    ("designUx", "design_ux"),
    ("problemSolving", "problem_solving"),
    ("codeQuality", "code_quality"),
    ("performance", "performance"),
    ("scalability", "scalability"),
    ("documentation", "documentation"),
    ("presentation", "presentation"),
    ("completeness", "completeness"),
)

SCORE_MIN = 0
SCORE_MAX = 10
TOTAL_MAX = SCORE_MAX * len(RUBRIC_CATEGORIES)


def clamp_to(value: Any, minimum: int, maximum: int, default: int) -> int:
    """
    Coerce ``value`` to an int and clamp it into ``[minimum, maximum]``.

    Floats and numeric strings are truncated toward zero and infinities
    saturate at the bounds. Missing, boolean, non-numeric and NaN input
    falls back to ``default``.
    """
    if value is None or isinstance(value, bool):
        number = default
    elif isinstance(value, int):
        number = value
    else:
        try:
            parsed = float(value.strip()) if isinstance(value, str) else float(value)
        except (TypeError, ValueError, OverflowError):
            parsed = math.nan
        if math.isnan(parsed):
            number = default
        elif math.isinf(parsed):
            number = maximum if parsed > 0 else minimum
        else:
            number = int(parsed)
    return max(minimum, min(maximum, number))


def clamp_score(value: Any) -> int:
    return clamp_to(value, SCORE_MIN, SCORE_MAX, 0)


@dataclass(frozen=True)
class RubricResult:
    """Clamped rubric components keyed by column name, plus their total."""

    components: Dict[str, int] = field(default_factory=dict)
    total: int = 0


def aggregate_rubric(fields: Mapping[str, Any]) -> RubricResult:
    """
    Clamp the ten rubric inputs and sum them.

    ``fields`` may use either wire names (``aiIntegration``) or column names
    (``ai_integration``); wire names win when both are present.
    """
    components: Dict[str, int] = {}
    for wire_name, column in RUBRIC_CATEGORIES:
        raw = fields.get(wire_name, fields.get(column))
        components[column] = clamp_score(raw)
    return RubricResult(components=components, total=sum(components.values()))
