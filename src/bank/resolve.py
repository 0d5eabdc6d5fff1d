"""
Resolve session entry ids into concrete questions.

A session stores plain ids. They resolve as follows:
- catalog id            -> the catalog question
- template id           -> generated instance for the session seed
- drill entry "<id>::n" -> the base catalog question
- anything else         -> logged and skipped (stale catalog tolerance)
"""
from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from .generator import generate_ped_midpoint_question
from .models import ExamBank, ExamQuestion

DRILL_SUFFIX_SEPARATOR = "::"


class UnknownExamSetError(KeyError):
    """Raised when a legacy exam set id is not defined by the bank."""

    def __init__(self, set_id: str):
        self.set_id = set_id
        super().__init__(f"Unknown exam set: {set_id}")

    def __str__(self) -> str:
        return self.args[0]


def make_drill_entry_id(base_id: str, occurrence: int) -> str:
    """First occurrence keeps the base id; later ones get '::<n>'."""
    if occurrence <= 1:
        return base_id
    return f"{base_id}{DRILL_SUFFIX_SEPARATOR}{occurrence}"


def extract_base_question_id(entry_id: str) -> str:
    return entry_id.split(DRILL_SUFFIX_SEPARATOR, 1)[0]


def legacy_set_ids(bank: ExamBank, set_id: str) -> list[str]:
    """Concatenate section ids in section order. No shuffling, no balancing."""
    exam_set = bank.exam_sets.get(set_id)
    if exam_set is None:
        raise UnknownExamSetError(set_id)
    return [qid for section in exam_set.sections for qid in section.question_ids]


def resolve_exam_questions(
    bank: ExamBank,
    entry_ids: Sequence[str],
    seed: int | None,
    sections: dict[str, str] | None = None,
) -> list[ExamQuestion]:
    """
    Resolve entry ids to ExamQuestions, preserving order.

    Args:
        bank: Loaded bank
        entry_ids: Ids as stored in the session
        seed: Session seed (needed for template ids; 0 when absent)
        sections: Optional entry id -> section name

    Returns:
        Resolved questions; unknown ids are skipped with a warning
    """
    by_id = bank.question_map()
    templates = bank.template_map()
    sections = sections or {}
    resolved: list[ExamQuestion] = []
    missing: list[str] = []

    for entry_id in entry_ids:
        question = by_id.get(entry_id) or by_id.get(extract_base_question_id(entry_id))
        if question is None and entry_id in templates:
            question = generate_ped_midpoint_question(templates[entry_id], seed or 0)
        if question is None:
            missing.append(entry_id)
            continue
        resolved.append(ExamQuestion(entry_id, question, sections.get(entry_id)))

    if missing:
        logger.warning(f"Missing question IDs: {missing}")
    return resolved


def build_exam_questions(bank: ExamBank, set_id: str, seed: int | None) -> list[ExamQuestion]:
    """Resolve a legacy set, tagging each question with its section name."""
    exam_set = bank.exam_sets.get(set_id)
    if exam_set is None:
        raise UnknownExamSetError(set_id)
    section_of = {
        qid: section.name for section in exam_set.sections for qid in section.question_ids
    }
    return resolve_exam_questions(bank, legacy_set_ids(bank, set_id), seed, section_of)
