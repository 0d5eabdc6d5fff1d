"""
Question Bank Model.

Typed, immutable representation of the exam bank document:
- Questions (single/multi choice, written, calculation table)
- Legacy exam sets (ordered sections of question or template ids)
- Generator templates (parametric questions resolved per seed)

Validation is structural: required fields, enumerated type tags and
numeric ranges are enforced here so that the loader can report the first
offending field path instead of a generic parse failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class QuestionType(str, Enum):
    """Question type tags used by the bank document."""

    MCQ_SINGLE = "mcq_single"
    MCQ_MULTI = "mcq_multi"
    SHORT_ANSWER = "short_answer"
    SCENARIO = "scenario"
    DIAGRAM_LOGIC = "diagram_logic"
    CALCULATION_TABLE = "calculation_table"


CHOICE_TYPES = frozenset({QuestionType.MCQ_SINGLE, QuestionType.MCQ_MULTI})
WRITTEN_TYPES = frozenset(
    {
        QuestionType.SHORT_ANSWER,
        QuestionType.SCENARIO,
        QuestionType.DIAGRAM_LOGIC,
        QuestionType.CALCULATION_TABLE,
    }
)


class _BankModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


# =============================================================================
# Questions
# =============================================================================


class BaseQuestion(_BankModel):
    """Fields shared by every catalog entry."""

    id: str = Field(min_length=1)
    topic: str
    points: float = Field(ge=0)
    prompt: str

    # Provenance (set for entries merged from supplementary packs)
    source: str | None = None
    pack: str | None = None

    @property
    def question_type(self) -> QuestionType:
        return QuestionType(self.type)  # type: ignore[attr-defined]

    @property
    def is_auto_gradable(self) -> bool:
        return self.question_type in CHOICE_TYPES


class SingleChoiceQuestion(BaseQuestion):
    type: Literal["mcq_single"]
    options: dict[str, str] = Field(min_length=2)
    answer_key: str
    rationale: str | None = None

    @field_validator("answer_key")
    @classmethod
    def _key_in_options(cls, value: str, info: ValidationInfo) -> str:
        options = info.data.get("options")
        if options is not None and value not in options:
            raise ValueError(f"answer key {value!r} is not one of the options")
        return value


class MultiChoiceQuestion(BaseQuestion):
    type: Literal["mcq_multi"]
    options: dict[str, str] = Field(min_length=2)
    correct_answers: list[str] = Field(min_length=1)
    rationale: str | None = None

    @field_validator("correct_answers")
    @classmethod
    def _answers_in_options(cls, value: list[str], info: ValidationInfo) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("correct answers contain duplicates")
        options = info.data.get("options")
        if options is not None:
            unknown = [key for key in value if key not in options]
            if unknown:
                raise ValueError(f"correct answers {unknown} are not options")
        return value


class WrittenQuestion(BaseQuestion):
    """Self-marked question answered against a displayed mark scheme."""

    type: Literal["short_answer", "scenario", "diagram_logic"]
    mark_scheme: list[str] = Field(min_length=1)
    model_answer: str


class CalculationTableQuestion(BaseQuestion):
    """Table of rows, each with one expected numeric value."""

    type: Literal["calculation_table"]
    mark_scheme: list[str] = Field(min_length=1)
    model_answer: str
    expected: dict[str, float] = Field(min_length=1)
    row_labels: dict[str, str] = Field(default_factory=dict)


Question = Annotated[
    Union[SingleChoiceQuestion, MultiChoiceQuestion, WrittenQuestion, CalculationTableQuestion],
    Field(discriminator="type"),
]
ChoiceQuestion = Union[SingleChoiceQuestion, MultiChoiceQuestion]


# =============================================================================
# Templates
# =============================================================================


class PriceQuantityRanges(_BankModel):
    price_min: int = Field(alias="priceMin", gt=0)
    price_max: int = Field(alias="priceMax", gt=0)
    quantity_min: int = Field(alias="quantityMin", gt=0)
    quantity_max: int = Field(alias="quantityMax", gt=0)

    @model_validator(mode="after")
    def _ranges_span_two_values(self) -> PriceQuantityRanges:
        # p1 != p2 and q1 != q2 must be satisfiable inside the range
        if self.price_min == self.price_max:
            raise ValueError("price range must span at least two values")
        if self.quantity_min == self.quantity_max:
            raise ValueError("quantity range must span at least two values")
        return self


class PedMidpointTemplate(_BankModel):
    """Midpoint price-elasticity calculation, resolved per session seed."""

    id: str = Field(min_length=1)
    template: Literal["ped_midpoint"]
    topic: str
    points: float = Field(ge=0)
    prompt: str
    ranges: PriceQuantityRanges


# =============================================================================
# Exam sets & bank
# =============================================================================


class ExamSection(_BankModel):
    name: str
    question_ids: list[str]
    points_each: float | None = Field(default=None, ge=0)


class ExamSet(_BankModel):
    duration_minutes: int = Field(gt=0)
    target_points: float = Field(ge=0)
    sections: list[ExamSection] = Field(min_length=1)


class Grading(_BankModel):
    total_points: float = Field(ge=0)


class ExamBank(_BankModel):
    """The full static catalog. Read-only once loaded."""

    version: str
    module: str
    assessment: str
    duration_minutes: int = Field(gt=0)
    grading: Grading
    question_types: list[QuestionType]
    bank: list[Question]
    exam_sets: dict[str, ExamSet]
    templates: list[PedMidpointTemplate] = Field(default_factory=list)

    def question_map(self) -> dict[str, BaseQuestion]:
        return {question.id: question for question in self.bank}

    def template_map(self) -> dict[str, PedMidpointTemplate]:
        return {template.id: template for template in self.templates}

    def questions_of_type(self, *types: QuestionType | str) -> list[BaseQuestion]:
        wanted = {QuestionType(t) for t in types}
        return [q for q in self.bank if q.question_type in wanted]

    def with_questions(self, extra: list[BaseQuestion]) -> ExamBank:
        """Return a copy with supplementary entries appended."""
        if not extra:
            return self
        return self.model_copy(update={"bank": [*self.bank, *extra]})


@dataclass(frozen=True)
class ExamQuestion:
    """A question as it appears in one session.

    entry_id is the id stored in the session's question list (answers are
    keyed by it); it differs from question.id for drill duplicates and
    template entries.
    """

    entry_id: str
    question: BaseQuestion
    section: str | None = None

    @property
    def type(self) -> QuestionType:
        return self.question.question_type
