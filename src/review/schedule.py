"""
Stage-based spaced repetition.

Each tracked question sits at stage 0, 1 or 2 with a calendar-date
next_review. Dates are plain `date` objects (local calendar day, no
timezone), so "due" is a date comparison independent of time of day.

Transitions, applied once per graded single-choice answer:
    wrong                -> stage 0, review tomorrow
    correct, untracked   -> nothing (never-missed questions are not scheduled)
    correct, stage 2     -> removed (graduated)
    correct, stage 0/1   -> stage + 1, review after that stage's interval
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, Field

MAX_STAGE = 2
STAGE_INTERVAL_DAYS: dict[int, int] = {0: 1, 1: 3, 2: 7}

ReviewMap = dict[str, "ReviewEntry"]


class ReviewEntry(BaseModel):
    """Scheduling state for one question."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    topic: str = ""
    stage: int = Field(default=0, ge=0, le=MAX_STAGE)
    next_review: date = Field(alias="nextReview")


def interval_for_stage(stage: int) -> timedelta:
    return timedelta(days=STAGE_INTERVAL_DAYS.get(stage, STAGE_INTERVAL_DAYS[MAX_STAGE]))


def update_review_map_for_answer(
    review_map: Mapping[str, ReviewEntry],
    question_id: str,
    topic: str,
    is_correct: bool,
    today: date,
) -> ReviewMap:
    """
    Apply one graded answer and return the new map.

    The input map is never mutated.
    """
    updated = dict(review_map)
    entry = updated.get(question_id)

    if not is_correct:
        updated[question_id] = ReviewEntry(
            id=question_id, topic=topic, stage=0, next_review=today + interval_for_stage(0)
        )
        return updated

    if entry is None:
        return updated

    if entry.stage >= MAX_STAGE:
        del updated[question_id]
        return updated

    new_stage = entry.stage + 1
    updated[question_id] = ReviewEntry(
        id=question_id,
        topic=topic or entry.topic,
        stage=new_stage,
        next_review=today + interval_for_stage(new_stage),
    )
    return updated


def get_due_ids(review_map: Mapping[str, ReviewEntry], today: date) -> list[str]:
    """Ids with next_review <= today, most overdue first."""
    due = [entry for entry in review_map.values() if entry.next_review <= today]
    due.sort(key=lambda entry: (entry.next_review, entry.id))
    return [entry.id for entry in due]


def get_due_count(review_map: Mapping[str, ReviewEntry], today: date) -> int:
    return sum(1 for entry in review_map.values() if entry.next_review <= today)
