"""
Single- and multi-choice markers.

Multi-choice scoring depends on mode:
- real_exam: all or nothing, selected set must equal the correct set
- practice:  any wrong key (or no selection) scores zero; otherwise
             points x (correct keys selected / total correct keys),
             rounded half-up to two decimals
"""

from typing import Any

from src.bank.models import MultiChoiceQuestion, QuestionType, SingleChoiceQuestion
from src.core.modes import ExamMode
from src.core.rounding import round_half_up

from . import register
from .base import MarkResult


@register(QuestionType.MCQ_SINGLE)
class SingleChoiceMarker:
    """Full points iff the chosen key is the answer key."""

    def mark(self, question: SingleChoiceQuestion, answer: Any, mode: ExamMode) -> MarkResult:
        correct = isinstance(answer, str) and answer == question.answer_key
        return MarkResult(
            is_correct=correct,
            points_earned=question.points if correct else 0.0,
            points_available=question.points,
            feedback="Correct" if correct else f"Correct answer: {question.answer_key}",
        )


@register(QuestionType.MCQ_MULTI)
class MultiChoiceMarker:
    """Set-equality marking, with proportional credit in practice mode."""

    def mark(self, question: MultiChoiceQuestion, answer: Any, mode: ExamMode) -> MarkResult:
        expected = set(question.correct_answers)
        selected = set(answer) if isinstance(answer, list) else set()
        key_list = ", ".join(sorted(expected))

        if mode == ExamMode.REAL_EXAM:
            correct = selected == expected
            return MarkResult(
                is_correct=correct,
                points_earned=question.points if correct else 0.0,
                points_available=question.points,
                feedback="Correct" if correct else f"Correct answers: {key_list}",
            )

        if not selected or selected - expected:
            return MarkResult(
                is_correct=False,
                points_earned=0.0,
                points_available=question.points,
                feedback=f"Correct answers: {key_list}",
            )

        fraction = len(selected & expected) / len(expected)
        earned = round_half_up(question.points * fraction)
        return MarkResult(
            is_correct=fraction == 1,
            is_partial=0 < fraction < 1,
            points_earned=earned,
            points_available=question.points,
            feedback="Correct" if fraction == 1 else f"Partially correct. Correct answers: {key_list}",
        )


def score_mcq_question(question, answer: Any, mode: ExamMode | str = ExamMode.REAL_EXAM) -> MarkResult:
    """Mark one single- or multi-choice question."""
    mode = ExamMode(mode)
    if isinstance(question, MultiChoiceQuestion):
        return MultiChoiceMarker().mark(question, answer, mode)
    if isinstance(question, SingleChoiceQuestion):
        return SingleChoiceMarker().mark(question, answer, mode)
    raise TypeError(f"Not a choice question: {question.id}")
