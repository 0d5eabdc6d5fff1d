"""
Session-level scoring.

Only auto-gradable (single/multi-choice) questions contribute to the score.
Scores are derived on demand from answers plus the resolved question list
and are never persisted.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from src.bank.models import ExamQuestion
from src.core.modes import ExamMode

from . import get_marker
from .base import MarkResult


@dataclass
class SessionScore:
    """Aggregate over the auto-gradable questions of a session."""
    correct: int = 0
    total: int = 0
    points_earned: float = 0.0
    points_available: float = 0.0
    results: dict[str, MarkResult] = field(default_factory=dict)

    @property
    def percentage(self) -> float:
        if not self.points_available:
            return 0.0
        return round(100 * self.points_earned / self.points_available, 1)


def mark_question(question: ExamQuestion, answer: Any, mode: ExamMode | str) -> MarkResult:
    marker = get_marker(question.type)
    if marker is None:
        raise ValueError(f"No marker for question type {question.type}")
    return marker.mark(question.question, answer, ExamMode(mode))


def score_session(
    questions: Sequence[ExamQuestion],
    answers: Mapping[str, Any],
    mode: ExamMode | str = ExamMode.REAL_EXAM,
) -> SessionScore:
    score = SessionScore()
    for item in questions:
        if not item.question.is_auto_gradable:
            continue
        result = mark_question(item, answers.get(item.entry_id), mode)
        score.results[item.entry_id] = result
        score.total += 1
        score.correct += int(result.is_correct)
        score.points_earned += result.points_earned
        score.points_available += result.points_available

    score.points_earned = round(score.points_earned, 2)
    score.points_available = round(score.points_available, 2)
    return score


def retry_question_ids(
    questions: Sequence[ExamQuestion],
    answers: Mapping[str, Any],
    mode: ExamMode | str = ExamMode.REAL_EXAM,
) -> list[str]:
    """Entry ids of auto-gradable questions that were not fully correct."""
    score = score_session(questions, answers, mode)
    return [entry_id for entry_id, result in score.results.items() if not result.is_correct]
