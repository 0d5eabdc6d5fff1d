"""
Question bank: typed catalog, loading/validation and template generation.

Components:
- models: Question types, exam sets, templates, ExamBank
- loader: parse_bank, supplementary packs, BankCache
- generator: seeded template materialisation
- resolve: session entry ids -> concrete questions
"""

from .generator import GeneratedPedQuestion, generate_ped_midpoint_question
from .loader import (
    BankCache,
    BankLoadError,
    BankValidationError,
    fetch_bank,
    load_bank_from_path,
    merge_packs,
    parse_bank,
    parse_supplementary_pack,
)
from .models import (
    BaseQuestion,
    CalculationTableQuestion,
    ExamBank,
    ExamQuestion,
    ExamSet,
    MultiChoiceQuestion,
    PedMidpointTemplate,
    QuestionType,
    SingleChoiceQuestion,
    WrittenQuestion,
)
from .resolve import (
    UnknownExamSetError,
    build_exam_questions,
    extract_base_question_id,
    legacy_set_ids,
    resolve_exam_questions,
)

__all__ = [
    # Models
    "BaseQuestion",
    "CalculationTableQuestion",
    "ExamBank",
    "ExamQuestion",
    "ExamSet",
    "MultiChoiceQuestion",
    "PedMidpointTemplate",
    "QuestionType",
    "SingleChoiceQuestion",
    "WrittenQuestion",
    # Loading
    "BankCache",
    "BankLoadError",
    "BankValidationError",
    "fetch_bank",
    "load_bank_from_path",
    "merge_packs",
    "parse_bank",
    "parse_supplementary_pack",
    # Generation & resolution
    "GeneratedPedQuestion",
    "generate_ped_midpoint_question",
    "UnknownExamSetError",
    "build_exam_questions",
    "extract_base_question_id",
    "legacy_set_ids",
    "resolve_exam_questions",
]
