"""
Timer and duration helpers.

Remaining time is always recomputed from the stored start instant, never
decremented, so a session reloaded mid-exam continues from the right place.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional

from config import Settings
from src.core.modes import ExamType

MINUTES_PER_QUESTION = 3
MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 50

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def compute_remaining_seconds(
    started_at: datetime,
    time_limit_seconds: int,
    now: Optional[datetime] = None,
) -> int:
    """limit - whole seconds elapsed since start, never negative."""
    now = now or utc_now()
    elapsed = math.floor((now - started_at).total_seconds())
    return max(0, time_limit_seconds - elapsed)


def should_auto_submit(remaining_seconds: int) -> bool:
    return remaining_seconds <= 0


def derive_lock_state(*records: Any) -> bool:
    """True if any record (session model or dict) is locked or submitted."""
    for record in records:
        if record is None:
            continue
        if isinstance(record, dict):
            submitted = record.get("submitted_at") or record.get("submittedAt")
            locked = record.get("locked")
        else:
            submitted = getattr(record, "submitted_at", None)
            locked = getattr(record, "locked", False)
        if submitted or locked:
            return True
    return False


def compute_exam_duration_minutes(question_count: int) -> int:
    """3 minutes per question, clamped to 5..50; tiny sessions get 5."""
    if question_count <= 2:
        return MIN_DURATION_MINUTES
    minutes = question_count * MINUTES_PER_QUESTION
    return min(MAX_DURATION_MINUTES, max(MIN_DURATION_MINUTES, minutes))


def time_limit_minutes_for(
    exam_type: ExamType,
    question_count: int,
    settings: Settings,
    set_minutes: Optional[int] = None,
) -> int:
    """
    Session time limit in minutes.

    Legacy sets use their own duration (settings fallback for an unknown set),
    the exam 1 and exam 2 families have fixed limits, and every other type
    gets the per-question duration.
    """
    exam_type = ExamType(exam_type)
    if exam_type is ExamType.LEGACY_SET:
        return set_minutes if set_minutes is not None else settings.legacy_time_limit_minutes
    if exam_type in (ExamType.EXAM1_MCQ, ExamType.FULL_SIM_1):
        return settings.exam1_time_limit_minutes
    if exam_type in (ExamType.EXAM2_WRITTEN, ExamType.FULL_SIM_2):
        return settings.exam2_time_limit_minutes
    return compute_exam_duration_minutes(question_count)
