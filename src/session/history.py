"""
Bounded session history.

Sessions are kept as one list record (most recent first, at most `limit`)
plus a separate active-session pointer. A pre-history single-session record
is migrated into the list the first time history is read; the old record is
left in place so the read never destroys data.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from pydantic import ValidationError

from src.core.modes import ExamMode, ExamType
from src.storage.keys import ACTIVE_SESSION_KEY, LEGACY_SESSION_KEY, SESSIONS_KEY
from src.storage.kv import KeyValueStore, read_json, write_json

from .models import ExamSession, LegacySession

DEFAULT_HISTORY_LIMIT = 20


class SessionHistoryStore:
    """
    Manages session persistence.

    Whole-record overwrites keyed by session id; there is a single writer
    per session, so no locking is done here.
    """

    def __init__(self, store: KeyValueStore, limit: int = DEFAULT_HISTORY_LIMIT):
        self.store = store
        self.limit = limit

    # =========================================================================
    # Reading
    # =========================================================================

    def load_sessions(self) -> list[ExamSession]:
        """All stored sessions, most recently created first."""
        raw = read_json(self.store, SESSIONS_KEY)
        if raw is None:
            return self._migrate_legacy()
        if not isinstance(raw, list):
            logger.warning(f"{SESSIONS_KEY} is not a list; ignoring stored history")
            return []

        sessions = []
        for record in raw:
            try:
                sessions.append(ExamSession.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable session record: {e.error_count()} error(s)")
        return self._ordered(sessions)

    def get_session(self, session_id: str) -> Optional[ExamSession]:
        return next((s for s in self.load_sessions() if s.id == session_id), None)

    # =========================================================================
    # Writing
    # =========================================================================

    def save_session(self, session: ExamSession) -> list[ExamSession]:
        """Insert or replace by id, then trim to the most recent `limit`."""
        sessions = [s for s in self.load_sessions() if s.id != session.id]
        sessions.append(session)
        sessions = self._ordered(sessions)[: self.limit]
        self._write(sessions)
        return sessions

    def delete_session(self, session_id: str) -> bool:
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            return False
        self._write(remaining)
        if self.get_active_id() == session_id:
            self.clear_active_id()
        logger.info(f"Deleted session {session_id}")
        return True

    def clear_history(self) -> None:
        self.store.remove(SESSIONS_KEY)
        self.store.remove(ACTIVE_SESSION_KEY)

    # =========================================================================
    # Active pointer
    # =========================================================================

    def get_active_id(self) -> Optional[str]:
        return self.store.get(ACTIVE_SESSION_KEY) or None

    def set_active_id(self, session_id: str) -> None:
        self.store.set(ACTIVE_SESSION_KEY, session_id)

    def clear_active_id(self) -> None:
        self.store.remove(ACTIVE_SESSION_KEY)

    def get_active_session(self) -> Optional[ExamSession]:
        active_id = self.get_active_id()
        return self.get_session(active_id) if active_id else None

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _ordered(sessions: list[ExamSession]) -> list[ExamSession]:
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    def _write(self, sessions: list[ExamSession]) -> None:
        write_json(self.store, SESSIONS_KEY, [s.to_record() for s in sessions])

    def _migrate_legacy(self) -> list[ExamSession]:
        data = read_json(self.store, LEGACY_SESSION_KEY)
        if data is None:
            return []
        try:
            legacy = LegacySession.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Legacy session record is unreadable, not migrating: {e.error_count()} error(s)")
            return []

        session = ExamSession(
            id=f"legacy-{legacy.set_id}-{int(legacy.started_at.timestamp())}",
            exam_type=ExamType.LEGACY_SET,
            mode=ExamMode.REAL_EXAM,
            created_at=legacy.started_at,
            started_at=legacy.started_at,
            time_limit_seconds=legacy.duration_minutes * 60,
            locked=legacy.submitted_at is not None,
            set_id=legacy.set_id,
            question_ids=legacy.question_ids,
            answers=legacy.answers,
            flags=legacy.flags,
            current_index=legacy.current_index,
            submitted_at=legacy.submitted_at,
            meta={"legacySetId": legacy.set_id},
        )
        self._write([session])
        self.set_active_id(session.id)
        logger.warning(f"Migrated legacy session for set {legacy.set_id} into history")
        return [session]
