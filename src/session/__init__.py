"""
Exam sessions: records, answers, timing, lifecycle and history.

Components:
- models: ExamSession / LegacySession records
- answers: structural answer-shape detection
- timer: remaining time, auto-submit, lock state, durations
- pacing: Ahead / On pace / Behind indicator
- machine: ExamSessionMachine lifecycle
- builder: create_session for every exam type
- history: bounded SessionHistoryStore with legacy migration
"""

from .answers import AnswerShape, DiagramAnswer, detect_shape, is_answered, normalize_answer
from .builder import BuildResult, create_retry_session, create_session, load_session_questions
from .history import SessionHistoryStore
from .machine import ExamSessionMachine, ExitChoice, SessionState
from .models import ExamSession, LegacySession, SubmitReason
from .pacing import PaceStatus, get_expected_elapsed_seconds, get_pace_status
from .timer import (
    compute_exam_duration_minutes,
    compute_remaining_seconds,
    derive_lock_state,
    should_auto_submit,
    time_limit_minutes_for,
)

__all__ = [
    "AnswerShape",
    "BuildResult",
    "DiagramAnswer",
    "ExamSession",
    "ExamSessionMachine",
    "ExitChoice",
    "LegacySession",
    "PaceStatus",
    "SessionHistoryStore",
    "SessionState",
    "SubmitReason",
    "compute_exam_duration_minutes",
    "compute_remaining_seconds",
    "create_retry_session",
    "create_session",
    "derive_lock_state",
    "detect_shape",
    "get_expected_elapsed_seconds",
    "get_pace_status",
    "is_answered",
    "load_session_questions",
    "normalize_answer",
    "should_auto_submit",
    "time_limit_minutes_for",
]
