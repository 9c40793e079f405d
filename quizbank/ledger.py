"""Wrong-question ledger and lifetime statistics."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from .data.schemas import Answer, Question, QuestionId, Stats, WrongQuestion, copy_answer
from .storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


class Ledger:
    """In-memory ledger that persists through the gateway after each mutation.

    At most one WrongQuestion exists per question id; repeat misses update the
    entry in place and bump ``attempts``.
    """

    def __init__(self, gateway: PersistenceGateway, clock: Optional[Clock] = None) -> None:
        self.gateway = gateway
        self.clock = clock or now_ms
        self.wrong_questions: List[WrongQuestion] = []
        self.stats = Stats()

    def load(self) -> None:
        self.wrong_questions = self.gateway.load_wrong_questions()
        self.stats = self.gateway.load_stats()
        logger.debug(
            "Loaded ledger: %d wrong questions, %d answered",
            len(self.wrong_questions), self.stats.total_answered,
        )

    def __len__(self) -> int:
        return len(self.wrong_questions)

    def is_empty(self) -> bool:
        return not self.wrong_questions

    def find(self, question_id: QuestionId) -> Optional[WrongQuestion]:
        for entry in self.wrong_questions:
            if entry.question_id == question_id:
                return entry
        return None

    def record_miss(self, question: Question, user_answer: Answer) -> WrongQuestion:
        ts = self.clock()
        entry = self.find(question.id)
        if entry is not None:
            entry.attempts += 1
            entry.timestamp = ts
            entry.user_answer = copy_answer(user_answer)
            entry.correct_answer = copy_answer(question.answer)
        else:
            entry = WrongQuestion(
                question_id=question.id,
                user_answer=copy_answer(user_answer),
                correct_answer=copy_answer(question.answer),
                timestamp=ts,
                attempts=1,
            )
            self.wrong_questions.append(entry)
        self.gateway.save_wrong_questions(self.wrong_questions)
        logger.debug("Recorded miss on question %r (attempts=%d)", question.id, entry.attempts)
        return entry

    def clear(self) -> None:
        self.wrong_questions = []
        self.gateway.save_wrong_questions(self.wrong_questions)
        logger.info("Wrong-question ledger cleared")

    def record_answer(self, is_correct: bool) -> None:
        self.stats.total_answered += 1
        if is_correct:
            self.stats.correct_answers += 1
        self.gateway.save_stats(self.stats)

    def add_study_time(self, minutes: int) -> None:
        self.stats.study_time += max(0, int(minutes))
        self.gateway.save_stats(self.stats)
