"""
Selection engine.

Maps (bank, mode parameters, seed) to an ordered, duplicate-free list of
session entry ids.

Components:
- categories: per-mode keyword category schemes
- balanced: bucketed round-robin pickers
- generators: generic, exam-type, exam 1, full simulations, legacy sets
- review: spaced-repetition review sessions
- drill: weighted topical drills
"""

from .balanced import SelectionResult, pick_balanced, pick_capped
from .categories import (
    EXAM1_SCHEME,
    FULL_SIM2_SCHEME,
    FULL_SIM_SCHEME,
    LEGACY_SCHEME,
    CategoryScheme,
    categorize_exam1_topic,
    categorize_full_sim2_topic,
    categorize_full_sim_topic,
    categorize_topic,
)
from .drill import DEFAULT_DRILL_RULES, DrillWeightRule, drill_weight, generate_drill_session
from .generators import (
    generate_exam1_mcq_session,
    generate_exam_session,
    generate_exam_type_session,
    generate_full_sim_exam1,
    generate_full_sim_exam2,
    generate_legacy_set_session,
)
from .review import generate_review_session

__all__ = [
    "SelectionResult",
    "pick_balanced",
    "pick_capped",
    "CategoryScheme",
    "LEGACY_SCHEME",
    "EXAM1_SCHEME",
    "FULL_SIM_SCHEME",
    "FULL_SIM2_SCHEME",
    "categorize_topic",
    "categorize_exam1_topic",
    "categorize_full_sim_topic",
    "categorize_full_sim2_topic",
    "generate_exam_session",
    "generate_exam_type_session",
    "generate_exam1_mcq_session",
    "generate_full_sim_exam1",
    "generate_full_sim_exam2",
    "generate_legacy_set_session",
    "generate_review_session",
    "DrillWeightRule",
    "DEFAULT_DRILL_RULES",
    "drill_weight",
    "generate_drill_session",
]
