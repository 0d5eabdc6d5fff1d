"""
Base protocol and types for markers.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.bank.models import BaseQuestion
from src.core.modes import ExamMode


@dataclass
class MarkResult:
    """Result of marking one answer."""
    is_correct: bool
    points_earned: float
    points_available: float
    feedback: str = ""
    is_partial: bool = False
    auto_graded: bool = True  # False for self-marked written answers
    rows: dict[str, bool] = field(default_factory=dict)  # calculation tables only

    @property
    def fraction(self) -> float:
        if not self.points_available:
            return 1.0 if self.is_correct else 0.0
        return self.points_earned / self.points_available


class Marker(Protocol):
    """Protocol for per-question-type markers."""

    def mark(self, question: BaseQuestion, answer: Any, mode: ExamMode) -> MarkResult:
        """Mark an answer. Answers of the wrong shape mark as unanswered."""
        ...
