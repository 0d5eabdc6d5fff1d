"""
Session construction.

Turns (exam type, mode, seed, mode-specific parameters) into a fresh
ExamSession plus its resolved questions. Every random mode gets a concrete
integer seed here (wall-clock derived when none is given) and the seed is
stored on the session, so reloading regenerates the same questions.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from loguru import logger

from config import Settings, get_settings
from src.bank.models import ExamBank, ExamQuestion
from src.bank.resolve import build_exam_questions, resolve_exam_questions
from src.core.modes import ExamMode, ExamType
from src.core.rng import hash_string_to_seed, mulberry32, normalize_seed, seeded_shuffle, wall_clock_seed
from src.review.schedule import ReviewEntry
from src.selection.balanced import SelectionResult
from src.selection.drill import generate_drill_session
from src.selection.generators import (
    generate_exam1_mcq_session,
    generate_exam_session,
    generate_exam_type_session,
    generate_full_sim_exam1,
    generate_full_sim_exam2,
    generate_legacy_set_session,
)
from src.selection.review import generate_review_session

from .models import ExamSession
from .timer import time_limit_minutes_for, utc_now


@dataclass
class BuildResult:
    """A new session and its questions, or the reason none could be built."""

    session: Optional[ExamSession] = None
    questions: list[ExamQuestion] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _select(
    bank: ExamBank,
    exam_type: ExamType,
    seed: int,
    settings: Settings,
    *,
    set_id: Optional[str],
    include_mcq: bool,
    pack: Optional[str],
    review_map: Optional[Mapping[str, ReviewEntry]],
    today: Optional[date],
    retry_ids: Optional[Sequence[str]],
) -> SelectionResult:
    if exam_type is ExamType.LEGACY_SET:
        return SelectionResult(ids=generate_legacy_set_session(bank, set_id or ""))
    if exam_type is ExamType.GENERIC:
        return SelectionResult(ids=generate_exam_session(bank, seed))
    if exam_type is ExamType.EXAM1_MCQ:
        return generate_exam1_mcq_session(
            bank, seed, settings.exam1_question_count, settings.exam1_category_cap
        )
    if exam_type is ExamType.EXAM2_WRITTEN:
        return SelectionResult(ids=generate_exam_type_session(bank, "exam2_written", seed))
    if exam_type is ExamType.FULL_SIM_1:
        return generate_full_sim_exam1(
            bank,
            seed,
            count=settings.full_sim1_question_count,
            multi_cap=settings.full_sim1_multi_cap,
            category_cap=settings.exam1_category_cap,
            source_prefixes=settings.full_sim1_source_prefixes,
        )
    if exam_type is ExamType.FULL_SIM_2:
        return generate_full_sim_exam2(bank, seed, include_mcq=include_mcq)
    if exam_type is ExamType.REVIEW:
        ids = generate_review_session(
            bank, review_map or {}, today or date.today(), settings.review_session_limit
        )
        return SelectionResult(ids=ids) if ids else SelectionResult.failure("No questions to review yet")
    if exam_type is ExamType.DRILL:
        if not pack:
            return SelectionResult.failure("A drill needs a pack or topic name")
        return generate_drill_session(bank, pack, seed, settings.drill_count)
    if exam_type is ExamType.RETRY:
        ids = list(dict.fromkeys(retry_ids or []))
        return SelectionResult(ids=ids) if ids else SelectionResult.failure("Nothing to retry")
    raise ValueError(f"Unsupported exam type: {exam_type}")


def _set_minutes(bank: ExamBank, exam_type: ExamType, set_id: Optional[str]) -> Optional[int]:
    if exam_type is not ExamType.LEGACY_SET:
        return None
    exam_set = bank.exam_sets.get(set_id or "")
    return exam_set.duration_minutes if exam_set else None


def _default_set_id(exam_type: ExamType, seed: int, set_id: Optional[str], pack: Optional[str]) -> str:
    if exam_type is ExamType.LEGACY_SET:
        return set_id or ""
    if exam_type is ExamType.DRILL:
        return f"drill-{pack}"
    return f"{exam_type.value}-{seed}"


def create_session(
    bank: ExamBank,
    exam_type: ExamType | str,
    *,
    mode: ExamMode | str = ExamMode.REAL_EXAM,
    seed: Optional[int | str] = None,
    set_id: Optional[str] = None,
    shuffle: bool = False,
    include_mcq: bool = False,
    pack: Optional[str] = None,
    review_map: Optional[Mapping[str, ReviewEntry]] = None,
    today: Optional[date] = None,
    retry_ids: Optional[Sequence[str]] = None,
    meta: Optional[dict] = None,
    settings: Optional[Settings] = None,
    clock=utc_now,
) -> BuildResult:
    """
    Build a new, not yet started session.

    Raises:
        UnknownExamSetError: legacy set id not defined by the bank

    Selection shortfalls come back as BuildResult.error.
    """
    settings = settings or get_settings()
    exam_type = ExamType(exam_type)
    seed_value = normalize_seed(wall_clock_seed() if seed is None else seed)

    selection = _select(
        bank,
        exam_type,
        seed_value,
        settings,
        set_id=set_id,
        include_mcq=include_mcq,
        pack=pack,
        review_map=review_map,
        today=today,
        retry_ids=retry_ids,
    )
    if not selection.ok:
        logger.warning(f"Could not build {exam_type.value} session: {selection.error}")
        return BuildResult(error=selection.error)

    ids = selection.ids
    if shuffle:
        ids = seeded_shuffle(ids, mulberry32(hash_string_to_seed(f"{seed_value}-shuffle")))

    minutes = time_limit_minutes_for(exam_type, len(ids), settings, _set_minutes(bank, exam_type, set_id))
    session = ExamSession(
        id=uuid.uuid4().hex,
        exam_type=exam_type,
        mode=ExamMode(mode),
        created_at=clock(),
        time_limit_seconds=minutes * 60,
        set_id=_default_set_id(exam_type, seed_value, set_id, pack),
        question_ids=ids,
        seed=seed_value,
        shuffle=shuffle or None,
        meta=dict(meta or {}),
    )
    if exam_type is ExamType.LEGACY_SET:
        session.meta.setdefault("legacySetId", set_id)

    questions = load_session_questions(bank, session)
    logger.info(f"Built {exam_type.value} session {session.id}: {len(questions)} questions, seed={seed_value}")
    return BuildResult(session=session, questions=questions)


def create_retry_session(
    bank: ExamBank,
    source: ExamSession,
    retry_ids: Sequence[str],
    **kwargs,
) -> BuildResult:
    """New session over the wrong answers of `source`, reusing its seed."""
    meta = {"retryOf": source.id}
    return create_session(
        bank,
        ExamType.RETRY,
        mode=kwargs.pop("mode", source.mode),
        seed=source.seed,
        retry_ids=retry_ids,
        meta=meta,
        **kwargs,
    )


def load_session_questions(bank: ExamBank, session: ExamSession) -> list[ExamQuestion]:
    """Resolve a stored session's ids against the bank using its seed."""
    if session.exam_type is ExamType.LEGACY_SET and not session.shuffle and session.set_id in bank.exam_sets:
        questions = build_exam_questions(bank, session.set_id, session.seed)
        by_entry = {q.entry_id: q for q in questions}
        return [by_entry[qid] for qid in session.question_ids if qid in by_entry]
    return resolve_exam_questions(bank, session.question_ids, session.seed)
