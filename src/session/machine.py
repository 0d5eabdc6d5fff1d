"""
Session lifecycle state machine.

    created --start--> active --submit(manual|timeout)--> submitted

Once submitted_at is set the session is terminal: answers, flags and
navigation are frozen and further submits do nothing. Real-exam sessions are
also marked locked on submit. Leaving before submission (save or discard)
is not a scoring event.

Every state change is written through the history store as a whole record.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from loguru import logger

from src.bank.models import ExamQuestion, QuestionType
from src.core.modes import ExamMode
from src.marking.aggregate import SessionScore, mark_question, score_session
from src.marking.base import MarkResult
from src.review.store import GradedAnswer, ReviewStore

from .answers import DiagramAnswer, is_answered, is_answered_for, normalize_answer
from .history import SessionHistoryStore
from .models import ExamSession, SubmitReason
from .pacing import PaceStatus, get_pace_status
from .timer import compute_remaining_seconds, derive_lock_state, should_auto_submit, utc_now

Clock = Callable[[], datetime]


class SessionState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    SUBMITTED = "submitted"


class ExitChoice(str, Enum):
    SAVE = "save"  # keep progress and leave
    DISCARD = "discard"  # delete the session and leave
    CANCEL = "cancel"  # stay


class ExamSessionMachine:
    """Drives one session through its lifecycle."""

    def __init__(
        self,
        session: ExamSession,
        questions: list[ExamQuestion],
        history: SessionHistoryStore,
        review: Optional[ReviewStore] = None,
        clock: Clock = utc_now,
        pace_threshold_seconds: int = 120,
    ):
        self.session = session
        self.questions = questions
        self.history = history
        self.review = review
        self.clock = clock
        self.pace_threshold_seconds = pace_threshold_seconds
        self._by_entry = {q.entry_id: q for q in questions}

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> SessionState:
        if self.session.submitted_at is not None:
            return SessionState.SUBMITTED
        if self.session.started_at is not None:
            return SessionState.ACTIVE
        return SessionState.CREATED

    @property
    def is_locked(self) -> bool:
        return derive_lock_state(self.session)

    @property
    def current_question(self) -> Optional[ExamQuestion]:
        entry_id = self.session.current_question_id
        return self._by_entry.get(entry_id) if entry_id else None

    def _can_mutate(self) -> bool:
        return not self.is_locked

    def _persist(self) -> None:
        self.history.save_session(self.session)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Stamp the start instant (once) and make this the active session."""
        if self.state is not SessionState.CREATED:
            return
        self.session.started_at = self.clock()
        self._persist()
        self.history.set_active_id(self.session.id)
        logger.info(
            f"Session {self.session.id} started: {len(self.session.question_ids)} questions, "
            f"{self.session.time_limit_seconds}s, mode={self.session.mode.value}"
        )

    def remaining_seconds(self) -> int:
        if self.session.started_at is None:
            return self.session.time_limit_seconds
        end = self.session.submitted_at or self.clock()
        return compute_remaining_seconds(self.session.started_at, self.session.time_limit_seconds, end)

    def elapsed_seconds(self) -> int:
        return self.session.time_limit_seconds - self.remaining_seconds()

    def tick(self) -> int:
        """Recompute remaining time; auto-submits when it reaches zero."""
        remaining = self.remaining_seconds()
        if self.state is SessionState.ACTIVE and should_auto_submit(remaining):
            self.submit(SubmitReason.TIMEOUT)
        return remaining

    def submit(self, reason: SubmitReason = SubmitReason.MANUAL) -> Optional[SessionScore]:
        """
        Finalise the session exactly once.

        Returns the score on the first call and None on every later call.
        """
        if self.session.submitted_at is not None:
            return None

        self.session.submitted_at = self.clock()
        self.session.submit_reason = SubmitReason(reason)

        score = self.score()
        if self.review is not None:
            # Unanswered questions leave the review map untouched
            answered = self.answered_ids()
            graded = [
                GradedAnswer(q.question.id, q.question.topic, score.results[q.entry_id].is_correct)
                for q in self.questions
                if q.type == QuestionType.MCQ_SINGLE and q.entry_id in answered and q.entry_id in score.results
            ]
            self.review.apply_mcq_results(graded, self.session.submitted_at.astimezone().date())

        if self.session.mode == ExamMode.REAL_EXAM:
            self.session.locked = True
        self._persist()
        logger.info(
            f"Session {self.session.id} submitted ({self.session.submit_reason.value}): "
            f"{score.correct}/{score.total} correct, {score.points_earned}/{score.points_available} points"
        )
        return score

    def exit(self, choice: ExitChoice) -> bool:
        """Leave the session. Returns False when the learner chose to stay."""
        choice = ExitChoice(choice)
        if choice is ExitChoice.CANCEL:
            return False
        if choice is ExitChoice.DISCARD:
            self.history.delete_session(self.session.id)
            logger.info(f"Session {self.session.id} discarded")
        else:
            self._persist()
        return True

    def needs_exit_confirmation(self) -> bool:
        return self.state is not SessionState.SUBMITTED and self.has_progress()

    # =========================================================================
    # Progress
    # =========================================================================

    def record_answer(self, value: Any, entry_id: Optional[str] = None) -> bool:
        """Upsert the answer for an entry (default: the current question)."""
        entry_id = entry_id or self.session.current_question_id
        if not self._can_mutate() or entry_id not in self.session.question_ids:
            return False
        if isinstance(value, DiagramAnswer):
            value = value.model_dump(by_alias=True)
        self.session.answers[entry_id] = value
        self._persist()
        return True

    def toggle_flag(self, entry_id: Optional[str] = None) -> bool:
        entry_id = entry_id or self.session.current_question_id
        if not self._can_mutate() or entry_id not in self.session.question_ids:
            return False
        if entry_id in self.session.flags:
            self.session.flags.remove(entry_id)
        else:
            self.session.flags.append(entry_id)
        self._persist()
        return True

    def navigate(self, index: int) -> bool:
        if not self._can_mutate() or not 0 <= index < len(self.session.question_ids):
            return False
        self.session.current_index = index
        self._persist()
        return True

    def has_progress(self) -> bool:
        return bool(self.session.flags) or any(is_answered(v) for v in self.session.answers.values())

    def answered_ids(self) -> set[str]:
        return {
            q.entry_id
            for q in self.questions
            if is_answered_for(q.type, self.session.answers.get(q.entry_id))
        }

    # =========================================================================
    # Scoring & feedback
    # =========================================================================

    def _normalized_answers(self) -> dict[str, Any]:
        return {
            q.entry_id: normalize_answer(q.type, self.session.answers.get(q.entry_id))
            for q in self.questions
        }

    def score(self) -> SessionScore:
        return score_session(self.questions, self._normalized_answers(), self.session.mode)

    def practice_feedback(self, entry_id: Optional[str] = None) -> Optional[MarkResult]:
        """Immediate mark for an answered question; practice mode only."""
        if self.session.mode != ExamMode.PRACTICE:
            return None
        question = self._by_entry.get(entry_id or self.session.current_question_id or "")
        if question is None:
            return None
        answer = normalize_answer(question.type, self.session.answers.get(question.entry_id))
        if answer is None or not is_answered(answer):
            return None
        return mark_question(question, answer, self.session.mode)

    def pace_status(self) -> PaceStatus:
        return get_pace_status(
            self.questions,
            self.session.current_index,
            self.elapsed_seconds(),
            self.pace_threshold_seconds,
        )
