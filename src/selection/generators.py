"""
Per-mode question-set generators.

Every generator maps (bank, mode parameters, seed) to an ordered,
duplicate-free list of question ids. Modes that can legitimately run out of
material return a SelectionResult with an error instead of raising, so the
caller can show a "not enough questions" message.

Modes:
- generic balanced session (10 single + 5 short + 2 scenario + 1 diagram)
- exam-type session (20 single-choice, or 20 non-single-choice)
- exam 1 MCQ session (capped round-robin, 8 per category)
- full simulation 1 (20 choice questions, at most 3 multi-choice)
- full simulation 2 (written quotas with per-category minimums, optional MCQ)
- legacy fixed set (section order, no shuffling)
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from loguru import logger

from src.bank.models import BaseQuestion, ExamBank, QuestionType
from src.bank.resolve import legacy_set_ids
from src.core.rng import mulberry32, normalize_seed, seeded_shuffle, wall_clock_seed

from .balanced import SelectionResult, build_buckets, pick_balanced, pick_capped, round_robin
from .categories import EXAM1_SCHEME, FULL_SIM2_SCHEME, FULL_SIM_SCHEME

GENERIC_TARGETS: tuple[tuple[QuestionType, int], ...] = (
    (QuestionType.MCQ_SINGLE, 10),
    (QuestionType.SHORT_ANSWER, 5),
    (QuestionType.SCENARIO, 2),
    (QuestionType.DIAGRAM_LOGIC, 1),
)

FULL_SIM2_WRITTEN_QUOTAS: tuple[tuple[QuestionType, int], ...] = (
    (QuestionType.SHORT_ANSWER, 5),
    (QuestionType.SCENARIO, 2),
    (QuestionType.DIAGRAM_LOGIC, 1),
)
FULL_SIM2_MCQ_COUNT = 5
FULL_SIM2_MINIMUMS: tuple[tuple[str, int], ...] = (
    ("fundamentals", 1),
    ("demand", 2),
    ("supply", 2),
    ("shift_trap", 1),
)


def _rng_for(seed: int | str | None):
    return mulberry32(normalize_seed(wall_clock_seed() if seed is None else seed))


# =============================================================================
# Generic & exam-type sessions
# =============================================================================


def generate_exam_session(bank: ExamBank, seed: int | str | None = None) -> list[str]:
    """Balanced-select each type's pool independently and concatenate."""
    rng = _rng_for(seed)
    used: set[str] = set()
    selection: list[str] = []

    for question_type, count in GENERIC_TARGETS:
        pool = [q for q in bank.questions_of_type(question_type) if q.id not in used]
        for question in pick_balanced(pool, count, rng):
            if question.id not in used:
                used.add(question.id)
                selection.append(question.id)

    return selection


def generate_exam_type_session(
    bank: ExamBank,
    exam_type: str,
    seed: int | str | None = None,
    count: int = 20,
) -> list[str]:
    """
    One balanced-select call over an exam-type pool.

    exam1_mcq draws single-choice questions only; exam2_written draws from
    every other type.
    """
    if exam_type == "exam1_mcq":
        pool = bank.questions_of_type(QuestionType.MCQ_SINGLE)
    elif exam_type == "exam2_written":
        pool = [q for q in bank.bank if q.question_type != QuestionType.MCQ_SINGLE]
    else:
        raise ValueError(f"Unsupported exam type: {exam_type}")
    return [question.id for question in pick_balanced(pool, count, _rng_for(seed))]


def generate_exam1_mcq_session(
    bank: ExamBank,
    seed: int | str | None = None,
    count: int = 20,
    category_cap: int = 8,
) -> SelectionResult:
    """Capped round-robin over single-choice questions (exam type 1)."""
    pool = bank.questions_of_type(QuestionType.MCQ_SINGLE)
    if len(pool) < count:
        message = f"Not enough single-choice questions for exam 1: need {count}, have {len(pool)}"
        logger.warning(message)
        return SelectionResult.failure(message)

    result = pick_capped(pool, count, category_cap, _rng_for(seed), EXAM1_SCHEME)
    if not result.ok:
        logger.warning(f"Exam 1 selection failed: {result.error}")
    return result


# =============================================================================
# Full simulations
# =============================================================================


def generate_full_sim_exam1(
    bank: ExamBank,
    seed: int | str,
    count: int = 20,
    multi_cap: int = 3,
    category_cap: int = 8,
    source_prefixes: Sequence[str] = ("MCQ-", "MCQM-", "FS1-"),
) -> SelectionResult:
    """
    Full simulated exam 1: choice questions from the allowed source prefixes.

    Six-category round-robin with at most `multi_cap` multi-choice questions
    and at most `category_cap` per category. Falls back to a shuffled scan of
    everything left (same caps) when the round-robin under-fills.
    """
    prefixes = tuple(source_prefixes)
    pool = [
        q
        for q in bank.questions_of_type(QuestionType.MCQ_SINGLE, QuestionType.MCQ_MULTI)
        if q.id.startswith(prefixes)
    ]
    if len(pool) < count:
        return SelectionResult.failure(
            f"Not enough questions for full simulation 1: need {count}, have {len(pool)}"
        )

    rng = mulberry32(normalize_seed(seed))
    buckets = build_buckets(pool, FULL_SIM_SCHEME, rng)
    counts: Counter = Counter()
    multi_taken = 0

    def accept(question: BaseQuestion) -> bool:
        nonlocal multi_taken
        if question.question_type == QuestionType.MCQ_MULTI:
            if multi_taken >= multi_cap:
                return False
            multi_taken += 1
        return True

    rejected: list[BaseQuestion] = []
    selected = round_robin(
        buckets,
        FULL_SIM_SCHEME.walk_order,
        count,
        cap=category_cap,
        counts=counts,
        accept=accept,
        rejected=rejected,
    )

    if len(selected) < count:
        leftovers = seeded_shuffle(rejected + [q for b in buckets.values() for q in b], rng)
        for question in leftovers:
            if len(selected) >= count:
                break
            category = FULL_SIM_SCHEME.classify(question.topic, question.prompt)
            if counts[category] >= category_cap or not accept(question):
                continue
            selected.append(question)
            counts[category] += 1

    ids = [question.id for question in selected]
    if len(ids) < count or len(set(ids)) != len(ids):
        return SelectionResult.failure(
            f"Unable to assemble {count} unique questions for full simulation 1 (got {len(set(ids))})"
        )
    logger.debug(f"Full simulation 1 seed={seed}: {dict(counts)}, multi={multi_taken}")
    return SelectionResult(ids=ids)


def generate_full_sim_exam2(
    bank: ExamBank,
    seed: int | str,
    include_mcq: bool = False,
) -> SelectionResult:
    """
    Full simulated exam 2: written paper, optionally preceded by 5 MCQs.

    Category minimums are ensured first by scanning the type pools in
    priority order (short answer, scenario, diagram, mcq); the remaining
    per-type quotas are then filled in shuffled order.
    """
    rng = mulberry32(normalize_seed(seed))
    quotas: dict[QuestionType, int] = dict(FULL_SIM2_WRITTEN_QUOTAS)
    if include_mcq:
        quotas[QuestionType.MCQ_SINGLE] = FULL_SIM2_MCQ_COUNT

    pools = {qt: seeded_shuffle(bank.questions_of_type(qt), rng) for qt in quotas}
    chosen: dict[QuestionType, list[BaseQuestion]] = {qt: [] for qt in quotas}
    used: set[str] = set()
    counts: Counter = Counter()

    def take(question_type: QuestionType, question: BaseQuestion) -> None:
        chosen[question_type].append(question)
        used.add(question.id)
        counts[FULL_SIM2_SCHEME.classify(question.topic, question.prompt)] += 1

    for category, minimum in FULL_SIM2_MINIMUMS:
        while counts[category] < minimum:
            pick = None
            for question_type, pool in pools.items():
                if len(chosen[question_type]) >= quotas[question_type]:
                    continue
                pick = next(
                    (
                        q
                        for q in pool
                        if q.id not in used
                        and FULL_SIM2_SCHEME.classify(q.topic, q.prompt) == category
                    ),
                    None,
                )
                if pick is not None:
                    take(question_type, pick)
                    break
            if pick is None:
                return SelectionResult.failure(
                    f"Unable to include at least {minimum} '{category}' questions in full simulation 2"
                )

    for question_type, pool in pools.items():
        for question in pool:
            if len(chosen[question_type]) >= quotas[question_type]:
                break
            if question.id not in used:
                take(question_type, question)
        if len(chosen[question_type]) < quotas[question_type]:
            return SelectionResult.failure(
                f"Not enough {question_type.value} questions for full simulation 2: "
                f"need {quotas[question_type]}, have {len(chosen[question_type])}"
            )

    order = [QuestionType.MCQ_SINGLE, *(qt for qt, _ in FULL_SIM2_WRITTEN_QUOTAS)]
    ids = [q.id for qt in order for q in chosen.get(qt, [])]
    if len(set(ids)) != len(ids):
        return SelectionResult.failure("Full simulation 2 produced duplicate questions")
    return SelectionResult(ids=ids)


# =============================================================================
# Legacy sets
# =============================================================================


def generate_legacy_set_session(bank: ExamBank, set_id: str) -> list[str]:
    """Section ids in section order. Templates resolve later with the session seed."""
    return legacy_set_ids(bank, set_id)
