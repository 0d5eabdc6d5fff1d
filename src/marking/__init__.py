"""
Markers for exam questions.

Each question type has a marker registered here with:
- mark(): score one answer against the question for a given exam mode

Single- and multi-choice are auto-graded; calculation tables are checked
row by row for feedback; written types are self-marked.
"""

from typing import TYPE_CHECKING

from src.bank.models import QuestionType

if TYPE_CHECKING:
    from .base import Marker


# Marker registry - populated by @register decorator
HANDLERS: dict[QuestionType, "Marker"] = {}


def register(question_type: QuestionType):
    """Decorator to register a marker."""
    def decorator(cls):
        HANDLERS[question_type] = cls()
        return cls
    return decorator


def get_marker(question_type: str | QuestionType) -> "Marker | None":
    """Get the marker for a question type."""
    if isinstance(question_type, str) and not isinstance(question_type, QuestionType):
        try:
            question_type = QuestionType(question_type.lower())
        except ValueError:
            return None
    return HANDLERS.get(question_type)


# Import markers to trigger registration
from . import choice  # noqa: E402
from . import table  # noqa: E402
from . import written  # noqa: E402
from .aggregate import SessionScore, mark_question, retry_question_ids, score_session  # noqa: E402
from .base import MarkResult  # noqa: E402
from .choice import score_mcq_question  # noqa: E402
from .table import check_table_rows, parse_numeric  # noqa: E402

__all__ = [
    "HANDLERS",
    "MarkResult",
    "SessionScore",
    "check_table_rows",
    "get_marker",
    "mark_question",
    "parse_numeric",
    "register",
    "retry_question_ids",
    "score_mcq_question",
    "score_session",
]
