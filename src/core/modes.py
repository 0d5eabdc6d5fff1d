"""
Exam modes and exam types.

ExamMode decides feedback and locking behaviour:
1. practice  - immediate per-question feedback, partial credit on multi-choice
2. real_exam - feedback hidden until submission, session locked on submit

ExamType tags how a session's questions were chosen.
"""

from __future__ import annotations

from enum import Enum


class ExamMode(str, Enum):
    """Feedback/locking mode of a session."""

    PRACTICE = "practice"
    REAL_EXAM = "real_exam"


class ExamType(str, Enum):
    """How a session's question list was produced."""

    LEGACY_SET = "legacy_set"  # Fixed set from the bank
    GENERIC = "generic"  # 10 single + 5 short + 2 scenario + 1 diagram
    EXAM1_MCQ = "exam1_mcq"  # Capped single-choice paper
    EXAM2_WRITTEN = "exam2_written"  # Balanced written paper
    FULL_SIM_1 = "full_sim_1"  # Simulated MCQ exam incl. multi-choice
    FULL_SIM_2 = "full_sim_2"  # Simulated written exam
    REVIEW = "review"  # Spaced-repetition review
    DRILL = "drill"  # Weighted topical drill
    RETRY = "retry"  # Wrong answers of an earlier session


def parse_exam_mode(value: str | ExamMode | None) -> ExamMode:
    """Parse a stored mode, falling back to real_exam for unknown values."""
    if isinstance(value, ExamMode):
        return value
    try:
        return ExamMode(value)
    except ValueError:
        return ExamMode.REAL_EXAM
