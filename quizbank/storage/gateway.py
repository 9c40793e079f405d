"""Serialization of quiz state to and from the key-value store.

Four independent records are kept, each rewritten whole on every save:

    questions       -> list of Question
    wrongQuestions  -> list of WrongQuestion
    stats           -> Stats
    quizProgress    -> SessionSnapshot, absent when no session is active

There is no transaction across keys; a crash between two saves can leave
them out of step.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from ..data.schemas import Question, SessionSnapshot, Stats, WrongQuestion
from ..errors import CorruptProgressSnapshotError
from .store import KeyValueStore

logger = logging.getLogger(__name__)

QUESTIONS_KEY = "questions"
WRONG_QUESTIONS_KEY = "wrongQuestions"
STATS_KEY = "stats"
PROGRESS_KEY = "quizProgress"


class PersistenceGateway:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _read(self, key: str) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Stored record '{key}' is not valid JSON: {e}") from e

    def _write(self, key: str, payload: Any) -> None:
        self.store.set(key, json.dumps(payload, ensure_ascii=False))

    # Questions
    def load_questions(self) -> List[Question]:
        payload = self._read(QUESTIONS_KEY)
        if not payload:
            return []
        return [Question.from_dict(q) for q in payload]

    def save_questions(self, questions: List[Question]) -> None:
        self._write(QUESTIONS_KEY, [q.to_dict() for q in questions])
        logger.debug("Saved %d questions", len(questions))

    # Wrong-question ledger
    def load_wrong_questions(self) -> List[WrongQuestion]:
        payload = self._read(WRONG_QUESTIONS_KEY)
        if not payload:
            return []
        return [WrongQuestion.from_dict(w) for w in payload]

    def save_wrong_questions(self, wrong_questions: List[WrongQuestion]) -> None:
        self._write(WRONG_QUESTIONS_KEY, [w.to_dict() for w in wrong_questions])

    # Stats
    def load_stats(self) -> Stats:
        payload = self._read(STATS_KEY)
        if not isinstance(payload, dict):
            return Stats()
        return Stats.from_dict(payload)

    def save_stats(self, stats: Stats) -> None:
        self._write(STATS_KEY, stats.to_dict())

    # Session snapshot
    def _decode_progress(self) -> Optional[SessionSnapshot]:
        raw = self.store.get(PROGRESS_KEY)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise TypeError(f"expected an object, got {type(payload).__name__}")
            return SessionSnapshot.from_dict(payload)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise CorruptProgressSnapshotError(f"Stored session snapshot is unreadable: {e}") from e

    def load_progress(self) -> Optional[SessionSnapshot]:
        """Return the stored snapshot; a corrupt one is discarded and reported as absent."""
        try:
            return self._decode_progress()
        except CorruptProgressSnapshotError as e:
            logger.warning("%s; discarding it", e)
            self.clear_progress()
            return None

    def has_resumable_progress(self) -> bool:
        try:
            snapshot = self._decode_progress()
        except CorruptProgressSnapshotError:
            return False
        return snapshot is not None and snapshot.is_resumable()

    def save_progress(self, snapshot: SessionSnapshot) -> None:
        if not snapshot.current_quiz_questions:
            return
        self._write(PROGRESS_KEY, snapshot.to_dict())

    def clear_progress(self) -> None:
        self.store.remove(PROGRESS_KEY)
