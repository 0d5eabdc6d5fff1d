"""
Persistent spaced-repetition map with change notification.

The whole map is one record, rewritten on every scoring event. Every write
notifies subscribers (e.g. a due-count display) so nothing has to poll.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from typing import NamedTuple

from loguru import logger
from pydantic import ValidationError

from src.storage.keys import SPACED_REPETITION_KEY
from src.storage.kv import KeyValueStore, read_json, write_json

from .schedule import ReviewEntry, ReviewMap, get_due_count, get_due_ids, update_review_map_for_answer

Listener = Callable[[ReviewMap], None]


class GradedAnswer(NamedTuple):
    question_id: str
    topic: str
    is_correct: bool


class ReviewStore:
    """Reads and rewrites the review map through a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._listeners: list[Listener] = []

    # =========================================================================
    # Subscription
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, review_map: ReviewMap) -> None:
        for listener in list(self._listeners):
            listener(review_map)

    # =========================================================================
    # Read / write
    # =========================================================================

    def load(self) -> ReviewMap:
        raw = read_json(self.store, SPACED_REPETITION_KEY, {})
        if not isinstance(raw, dict):
            logger.warning("Spaced-repetition record is not an object; starting empty")
            return {}

        review_map: ReviewMap = {}
        for question_id, data in raw.items():
            try:
                review_map[question_id] = ReviewEntry.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Dropping malformed review entry {question_id}: {e.error_count()} error(s)")
        return review_map

    def save(self, review_map: ReviewMap) -> None:
        payload = {
            qid: entry.model_dump(mode="json", by_alias=True) for qid, entry in review_map.items()
        }
        write_json(self.store, SPACED_REPETITION_KEY, payload)
        self._notify(review_map)

    def clear(self) -> None:
        self.store.remove(SPACED_REPETITION_KEY)
        self._notify({})

    # =========================================================================
    # Scoring events
    # =========================================================================

    def apply_mcq_results(self, results: Iterable[GradedAnswer], today: date) -> ReviewMap:
        """Fold one submission's graded single-choice answers into the map."""
        review_map = self.load()
        for result in results:
            review_map = update_review_map_for_answer(
                review_map, result.question_id, result.topic, result.is_correct, today
            )
        self.save(review_map)
        logger.info(f"Spaced repetition updated: {len(review_map)} tracked question(s)")
        return review_map

    def due_ids(self, today: date) -> list[str]:
        return get_due_ids(self.load(), today)

    def due_count(self, today: date) -> int:
        return get_due_count(self.load(), today)
