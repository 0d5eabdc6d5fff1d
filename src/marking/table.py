"""
Calculation-table marker.

Each row is compared on its own: the entry is cleaned of currency symbols,
thousands separators and whitespace, parsed as a float and compared exactly
against the expected value. Unparseable or missing rows are wrong.
"""

import re
from typing import Any

from src.bank.models import CalculationTableQuestion, QuestionType
from src.core.modes import ExamMode

from . import register
from .base import MarkResult

_STRIP = re.compile(r"[$£€¥,\s]")


def parse_numeric(raw: Any) -> float | None:
    """Parse a table entry, or None if it is not a number."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if not isinstance(raw, str):
        return None
    value = _STRIP.sub("", raw)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def check_table_rows(question: CalculationTableQuestion, answer: Any) -> dict[str, bool]:
    """row id -> whether that row's entry equals the expected value."""
    entries = answer if isinstance(answer, dict) else {}
    results = {}
    for row, expected in question.expected.items():
        parsed = parse_numeric(entries.get(row))
        results[row] = parsed is not None and parsed == expected
    return results


@register(QuestionType.CALCULATION_TABLE)
class CalculationTableMarker:
    """Per-row check; points are shown as feedback, not counted in the score."""

    def mark(self, question: CalculationTableQuestion, answer: Any, mode: ExamMode) -> MarkResult:
        rows = check_table_rows(question, answer)
        right = sum(rows.values())
        fraction = right / len(rows)
        return MarkResult(
            is_correct=fraction == 1,
            is_partial=0 < fraction < 1,
            points_earned=round(question.points * fraction, 2),
            points_available=question.points,
            feedback=f"{right} of {len(rows)} rows correct",
            auto_graded=False,
            rows=rows,
        )
