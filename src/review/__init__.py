"""
Spaced-repetition scheduler.

Components:
- schedule: ReviewEntry, stage transitions, due-set computation
- store: ReviewStore (persistence + change notification)
"""

from .schedule import (
    MAX_STAGE,
    STAGE_INTERVAL_DAYS,
    ReviewEntry,
    get_due_count,
    get_due_ids,
    update_review_map_for_answer,
)
from .store import GradedAnswer, ReviewStore

__all__ = [
    "MAX_STAGE",
    "STAGE_INTERVAL_DAYS",
    "ReviewEntry",
    "GradedAnswer",
    "ReviewStore",
    "get_due_count",
    "get_due_ids",
    "update_review_map_for_answer",
]
