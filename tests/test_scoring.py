from __future__ import annotations

import math

import pytest

from app.services.scoring import (
    RUBRIC_CATEGORIES,
    TOTAL_MAX,
    aggregate_rubric,
    clamp_score,
    clamp_to,
)


FULL_RUBRIC = {
    "innovation": 10,
    "aiIntegration": 8,
    "designUx": 7,
    "problemSolving": 9,
    "codeQuality": 6,
    "performance": 5,
    "scalability": 4,
    "documentation": 8,
    "presentation": 9,
    "completeness": 10,
}


def test_rubric_total_sums_all_categories():
    result = aggregate_rubric(FULL_RUBRIC)
    assert result.total == 76
    assert result.components["ai_integration"] == 8
    assert result.components["completeness"] == 10
    assert len(result.components) == len(RUBRIC_CATEGORIES) == 10


def test_out_of_range_values_are_clamped():
    result = aggregate_rubric({**FULL_RUBRIC, "innovation": 15, "performance": -3})
    assert result.components["innovation"] == 10
    assert result.components["performance"] == 0
    assert result.total == 76 - 5


def test_missing_and_garbage_values_count_as_zero():
    result = aggregate_rubric({"innovation": "abc", "designUx": None, "codeQuality": True})
    assert result.total == 0
    assert set(result.components.values()) == {0}


def test_column_names_are_accepted_and_wire_names_win():
    assert aggregate_rubric({"ai_integration": 7}).components["ai_integration"] == 7
    both = aggregate_rubric({"ai_integration": 2, "aiIntegration": 9})
    assert both.components["ai_integration"] == 9


def test_total_never_exceeds_maximum():
    result = aggregate_rubric({wire: 99 for wire, _ in RUBRIC_CATEGORIES})
    assert result.total == TOTAL_MAX == 100


@pytest.mark.parametrize(
    "value, expected",
    [
        (7, 7),
        (7.9, 7),
        ("8", 8),
        (" 6.5 ", 6),
        (-0.5, 0),
        (11, 10),
        (math.inf, 10),
        (-math.inf, 0),
        ("1e400", 10),
        (math.nan, 0),
        ([], 0),
    ],
)
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected


def test_clamp_to_uses_default_then_clamps_it():
    assert clamp_to(None, 1, 5, 3) == 3
    assert clamp_to("x", 1, 5, 9) == 5
    assert clamp_to(100, 1, 5, 3) == 5
