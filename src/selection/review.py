"""Spaced-repetition review session assembly."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from loguru import logger

from src.bank.models import ExamBank, QuestionType
from src.review.schedule import ReviewEntry, get_due_ids


def generate_review_session(
    bank: ExamBank,
    review_map: Mapping[str, ReviewEntry],
    today: date,
    limit: int = 10,
) -> list[str]:
    """
    Due questions first, then backfill up to `limit`.

    Backfill order: single-choice questions sharing a topic with a due
    question, then any other unused single-choice question, both in bank
    order. Due ids no longer in the catalog are skipped.
    """
    catalog = bank.question_map()
    due = get_due_ids(review_map, today)
    stale = [qid for qid in due if qid not in catalog]
    if stale:
        logger.warning(f"Skipping {len(stale)} due review id(s) missing from the bank: {stale}")

    selected = [qid for qid in due if qid in catalog][:limit]
    used = set(selected)
    topics = {catalog[qid].topic for qid in selected}
    singles = bank.questions_of_type(QuestionType.MCQ_SINGLE)

    for same_topic_only in (True, False):
        for question in singles:
            if len(selected) >= limit:
                break
            if question.id in used or (same_topic_only and question.topic not in topics):
                continue
            selected.append(question.id)
            used.add(question.id)

    logger.debug(f"Review session: {len(due)} due, {len(selected)} selected (limit {limit})")
    return selected
