"""Written answers are self-marked against the displayed mark scheme."""

from typing import Any

from src.bank.models import QuestionType, WrittenQuestion
from src.core.modes import ExamMode

from . import register
from .base import MarkResult


class WrittenMarker:
    def mark(self, question: WrittenQuestion, answer: Any, mode: ExamMode) -> MarkResult:
        criteria = "; ".join(question.mark_scheme)
        return MarkResult(
            is_correct=False,
            points_earned=0.0,
            points_available=question.points,
            feedback=f"Self-mark against: {criteria}",
            auto_graded=False,
        )


register(QuestionType.SHORT_ANSWER)(WrittenMarker)
register(QuestionType.SCENARIO)(WrittenMarker)
register(QuestionType.DIAGRAM_LOGIC)(WrittenMarker)
