"""
Pacing indicator.

Each question type has a planned time (a section's time budget divided by
its expected question count). The expected elapsed time at a position is the
sum of plans for every question before it; the learner is Behind/Ahead when
actual elapsed time differs from that by more than the threshold.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from src.bank.models import ExamQuestion, QuestionType

PLAN_SECONDS: dict[QuestionType, float] = {
    QuestionType.MCQ_SINGLE: (15 * 60) / 10,
    QuestionType.MCQ_MULTI: (15 * 60) / 10,
    QuestionType.SHORT_ANSWER: (20 * 60) / 5,
    QuestionType.SCENARIO: (15 * 60) / 3,
    QuestionType.DIAGRAM_LOGIC: (15 * 60) / 3,
    QuestionType.CALCULATION_TABLE: (20 * 60) / 5,
}


class PaceStatus(str, Enum):
    AHEAD = "Ahead"
    ON_PACE = "On pace"
    BEHIND = "Behind"


def get_expected_elapsed_seconds(questions: Sequence[ExamQuestion], current_index: int) -> float:
    if not questions:
        return 0
    index = max(0, min(current_index, len(questions)))
    return sum(PLAN_SECONDS[q.type] for q in questions[:index])


def get_pace_status(
    questions: Sequence[ExamQuestion],
    current_index: int,
    elapsed_seconds: float,
    threshold_seconds: float = 120,
) -> PaceStatus:
    if not questions:
        return PaceStatus.ON_PACE

    delta = elapsed_seconds - get_expected_elapsed_seconds(questions, current_index)
    if delta > threshold_seconds:
        return PaceStatus.BEHIND
    if delta < -threshold_seconds:
        return PaceStatus.AHEAD
    return PaceStatus.ON_PACE
