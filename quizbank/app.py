"""Root object tying the bank, ledger, session engine and store together.

``QuizApp`` is the only surface a front end needs: it exposes read accessors
for the bank, ledger, stats and session progress, and the mutating
operations that each persist before returning.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .data.parser import BankSource, load_bank
from .data.schemas import (
    MODE_RANDOM,
    Answer,
    Question,
    QuestionProgress,
    SessionSnapshot,
    SessionSummary,
    Stats,
    WrongQuestion,
)
from .ledger import Clock, Ledger
from .session import QuizState, SessionEngine
from .storage.gateway import PersistenceGateway
from .storage.store import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WrongQuestionDetail:
    entry: WrongQuestion
    question: Question


class QuizApp:
    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.gateway = PersistenceGateway(store if store is not None else MemoryStore())
        self.state = QuizState(ledger=Ledger(self.gateway, clock=clock))
        self.engine = SessionEngine(self.state, self.gateway, clock=clock, rng=rng)

    @classmethod
    def from_data_dir(cls, data_dir: str | Path, rng: Optional[random.Random] = None) -> "QuizApp":
        app = cls(store=JsonFileStore(data_dir), rng=rng)
        app.load_stored_data()
        return app

    # Read accessors
    @property
    def questions(self) -> List[Question]:
        return self.state.questions

    @property
    def wrong_questions(self) -> List[WrongQuestion]:
        return self.state.ledger.wrong_questions

    @property
    def stats(self) -> Stats:
        return self.state.ledger.stats

    @property
    def progress(self) -> Optional[SessionSnapshot]:
        return self.engine.progress

    @property
    def question_count(self) -> int:
        return len(self.state.questions)

    @property
    def wrong_question_count(self) -> int:
        return len(self.state.ledger)

    @property
    def correct_rate(self) -> int:
        return self.stats.correct_rate

    def load_stored_data(self) -> None:
        """Populate bank, ledger and stats from the store and restore any session."""
        self.state.questions = self.gateway.load_questions()
        self.state.ledger.load()
        self.engine.restore()
        logger.info(
            "Loaded %d questions, %d wrong questions",
            self.question_count, self.wrong_question_count,
        )

    # Bank
    def set_questions(self, questions: List[Question]) -> None:
        self.state.questions = list(questions)
        self.gateway.save_questions(self.state.questions)

    def import_bank(self, source: BankSource) -> int:
        """Replace the bank with the questions parsed from ``source``.

        Raises:
            FileNotFoundError: If ``source`` is a missing path
            MalformedSourceError: If the source cannot be decoded
        """
        questions = load_bank(source)
        self.set_questions(questions)
        logger.info("Imported %d questions", len(questions))
        return len(questions)

    # Session
    def start_quiz(self, mode: str = MODE_RANDOM) -> SessionSnapshot:
        return self.engine.start(mode)

    def get_current_question(self) -> Optional[Question]:
        return self.engine.get_current_question()

    def submit_answer(self, answer: Answer) -> bool:
        return self.engine.submit_answer(answer)

    def next_question(self) -> bool:
        return self.engine.advance()

    def finish_quiz(self) -> SessionSummary:
        return self.engine.finish()

    def get_question_progress(self) -> QuestionProgress:
        return self.engine.get_progress()

    def has_quiz_progress(self) -> bool:
        return self.engine.has_resumable_session()

    def clear_quiz_progress(self) -> None:
        self.engine.discard()

    # Ledger
    def clear_wrong_questions(self) -> None:
        self.state.ledger.clear()

    def wrong_question_details(self) -> List[WrongQuestionDetail]:
        """Ledger entries joined with their bank question, in ledger order."""
        by_id = {q.id: q for q in self.state.questions}
        return [
            WrongQuestionDetail(entry=w, question=by_id[w.question_id])
            for w in self.wrong_questions
            if w.question_id in by_id
        ]
