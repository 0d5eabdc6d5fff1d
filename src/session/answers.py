"""
Answer values and their shapes.

Stored answers carry no type tag (older saved sessions predate one), so the
shape is detected structurally:

    str                      -> text / single-choice key
    list[str]                -> multi-choice keys
    object with "curve"      -> diagram response
    object without "curve"   -> calculation table (row id -> entry)

Anything else, or a shape that does not fit the question type, is treated
as unanswered rather than raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from src.bank.models import QuestionType

Curve = Literal["", "Demand", "Supply"]
Direction = Literal["", "Left", "Right"]
Effect = Literal["", "Up", "Down", "Uncertain"]


class AnswerShape(str, Enum):
    TEXT = "text"
    CHOICES = "choices"
    DIAGRAM = "diagram"
    TABLE = "table"
    INVALID = "invalid"


class DiagramAnswer(BaseModel):
    """Structured response to a diagram-logic question."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    curve: Curve = ""
    direction: Direction = ""
    price_effect: Effect = ""
    quantity_effect: Effect = ""
    justification: str = ""

    @field_validator("curve", "direction", "price_effect", "quantity_effect", "justification", mode="before")
    @classmethod
    def _null_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def is_answered(self) -> bool:
        return bool(
            self.curve
            or self.direction
            or self.price_effect
            or self.quantity_effect
            or self.justification.strip()
        )


# Shapes each question type accepts
EXPECTED_SHAPES: dict[QuestionType, frozenset[AnswerShape]] = {
    QuestionType.MCQ_SINGLE: frozenset({AnswerShape.TEXT}),
    QuestionType.MCQ_MULTI: frozenset({AnswerShape.CHOICES}),
    QuestionType.SHORT_ANSWER: frozenset({AnswerShape.TEXT}),
    QuestionType.SCENARIO: frozenset({AnswerShape.TEXT}),
    # Plain text is accepted as a justification-only response
    QuestionType.DIAGRAM_LOGIC: frozenset({AnswerShape.DIAGRAM, AnswerShape.TEXT}),
    QuestionType.CALCULATION_TABLE: frozenset({AnswerShape.TABLE}),
}


def detect_shape(value: Any) -> AnswerShape:
    if isinstance(value, str):
        return AnswerShape.TEXT
    if isinstance(value, list):
        return AnswerShape.CHOICES if all(isinstance(v, str) for v in value) else AnswerShape.INVALID
    if isinstance(value, dict):
        return AnswerShape.DIAGRAM if "curve" in value else AnswerShape.TABLE
    return AnswerShape.INVALID


def parse_diagram(value: Any) -> Optional[DiagramAnswer]:
    """Diagram response from a stored value, or None if it is not one."""
    if isinstance(value, DiagramAnswer):
        return value
    if isinstance(value, str):
        return DiagramAnswer(justification=value)
    if detect_shape(value) is not AnswerShape.DIAGRAM:
        return None
    try:
        return DiagramAnswer.model_validate(value)
    except ValidationError:
        return None


def is_answered(value: Any) -> bool:
    """Per-shape "answered" check, independent of question type."""
    shape = detect_shape(value)
    if shape is AnswerShape.TEXT:
        return bool(value.strip())
    if shape is AnswerShape.CHOICES:
        return len(value) > 0
    if shape is AnswerShape.DIAGRAM:
        diagram = parse_diagram(value)
        return diagram is not None and diagram.is_answered()
    if shape is AnswerShape.TABLE:
        return any(isinstance(v, str) and v.strip() for v in value.values())
    return False


def normalize_answer(question_type: QuestionType, value: Any) -> Any:
    """
    The answer as the marker should see it.

    Values whose shape does not fit the question type come back as None.
    """
    if isinstance(value, DiagramAnswer):
        value = value.model_dump(by_alias=True)
    shape = detect_shape(value)
    if shape not in EXPECTED_SHAPES.get(QuestionType(question_type), frozenset()):
        return None
    if shape is AnswerShape.DIAGRAM and parse_diagram(value) is None:
        return None
    return value


def is_answered_for(question_type: QuestionType, value: Any) -> bool:
    normalized = normalize_answer(question_type, value)
    return normalized is not None and is_answered(normalized)
