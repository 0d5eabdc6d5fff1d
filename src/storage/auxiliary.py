"""
Small auxiliary stores used by the results/review surface.

None of these are required by the session core; each wraps one record in a
KeyValueStore.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .keys import EXAM_MODE_KEY, MISTAKES_KEY, SELF_MARKS_KEY
from .kv import KeyValueStore, read_json, write_json

EXAM_MODES = ("practice", "real_exam")
DEFAULT_EXAM_MODE = "real_exam"

MISTAKE_REASONS = (
    "Concept gap",
    "Misread question",
    "Rushed / time pressure",
    "Diagram confusion",
    "Careless mistake",
)


class ExamModeStore:
    """Remembers the last chosen exam mode."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> str:
        value = self.store.get(EXAM_MODE_KEY)
        return value if value in EXAM_MODES else DEFAULT_EXAM_MODE

    def set(self, mode: str) -> None:
        if mode not in EXAM_MODES:
            raise ValueError(f"Unknown exam mode: {mode}")
        self.store.set(EXAM_MODE_KEY, mode)


class MistakeStore:
    """question id -> reason the learner gave for getting it wrong."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def all(self) -> dict[str, str]:
        data = read_json(self.store, MISTAKES_KEY, {})
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if v in MISTAKE_REASONS}

    def get(self, question_id: str) -> Optional[str]:
        return self.all().get(question_id)

    def set(self, question_id: str, reason: Optional[str]) -> dict[str, str]:
        """Record a reason; an empty reason clears the entry."""
        data = self.all()
        if not reason:
            data.pop(question_id, None)
        elif reason not in MISTAKE_REASONS:
            raise ValueError(f"Unknown mistake reason: {reason}")
        else:
            data[question_id] = reason
        write_json(self.store, MISTAKES_KEY, data)
        return data


class SelfMarkStore:
    """session id -> {question id -> points the learner awarded themselves}."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self) -> dict[str, dict[str, float]]:
        data = read_json(self.store, SELF_MARKS_KEY, {})
        return data if isinstance(data, dict) else {}

    def for_session(self, session_id: str) -> dict[str, float]:
        return dict(self._load().get(session_id, {}))

    def set_mark(self, session_id: str, question_id: str, points: float) -> None:
        if points < 0:
            raise ValueError("Self-marked points cannot be negative")
        data = self._load()
        data.setdefault(session_id, {})[question_id] = points
        write_json(self.store, SELF_MARKS_KEY, data)

    def clear_session(self, session_id: str) -> None:
        data = self._load()
        if data.pop(session_id, None) is not None:
            write_json(self.store, SELF_MARKS_KEY, data)
            logger.debug(f"Cleared self-marks for session {session_id}")

    def total(self, session_id: str) -> float:
        return round(sum(self.for_session(session_id).values()), 2)
