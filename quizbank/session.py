"""Quiz session engine.

A session is Idle until ``start`` builds a question sequence, Running while a
snapshot is held, and returns to Idle on ``finish``. The snapshot is written
to the store after every step so an interrupted session can be resumed on the
next startup.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .data.schemas import (
    MODE_RANDOM,
    MODE_WRONG,
    MULTIPLE,
    QUIZ_MODES,
    Answer,
    Question,
    QuestionProgress,
    SessionSnapshot,
    SessionSummary,
    UserAnswer,
    copy_answer,
)
from .errors import EmptyBankError, EmptyLedgerError, NoQuestionsAvailableError
from .ledger import Clock, Ledger, now_ms
from .storage.gateway import PersistenceGateway
from .utils.io import shuffle_list

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"

MS_PER_MINUTE = 60_000


@dataclass
class QuizState:
    """Process-wide quiz data: the loaded bank plus the ledger."""
    ledger: Ledger
    questions: List[Question] = field(default_factory=list)


def _as_list(answer: Any) -> list:
    if isinstance(answer, (list, tuple)):
        return list(answer)
    return [answer]


def is_answer_correct(question: Question, user_answer: Answer) -> bool:
    """Judge a submission against the question's answer.

    Multiple-choice answers compare as sorted lists, so submission order does
    not matter but a repeated key does.
    """
    if question.type == MULTIPLE:
        return sorted(_as_list(user_answer), key=str) == sorted(_as_list(question.answer), key=str)
    return user_answer == question.answer


def _round_half_up(x: float) -> int:
    return int(x + 0.5)


class SessionEngine:
    """Builds, advances and scores quiz sessions over a ``QuizState``.

    Not reentrant: each call must complete (including its store writes)
    before the next one starts.
    """

    def __init__(
        self,
        state: QuizState,
        gateway: PersistenceGateway,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = state
        self.gateway = gateway
        self.clock = clock or now_ms
        self.rng = rng
        self.progress: Optional[SessionSnapshot] = None

    @property
    def status(self) -> str:
        return RUNNING if self.progress is not None else IDLE

    @property
    def ledger(self) -> Ledger:
        return self.state.ledger

    def _build_sequence(self, mode: str) -> List[Question]:
        if mode == MODE_RANDOM:
            return shuffle_list(self.state.questions, rng=self.rng)
        by_id = {q.id: q for q in self.state.questions}
        return [by_id[w.question_id] for w in self.ledger.wrong_questions if w.question_id in by_id]

    def start(self, mode: str = MODE_RANDOM) -> SessionSnapshot:
        """Begin a new session, replacing any session in progress.

        Raises:
            ValueError: If ``mode`` is not a known quiz mode
            EmptyBankError: If no questions are loaded
            EmptyLedgerError: If ``mode`` is wrong and the ledger is empty
            NoQuestionsAvailableError: If no ledger entry maps to a bank question
        """
        if mode not in QUIZ_MODES:
            raise ValueError(f"Unknown quiz mode '{mode}' (expected: {', '.join(QUIZ_MODES)})")
        if not self.state.questions:
            raise EmptyBankError("No questions loaded; import a question bank first")
        if mode == MODE_WRONG and self.ledger.is_empty():
            raise EmptyLedgerError("The wrong-question ledger is empty; run a random quiz first")

        sequence = self._build_sequence(mode)
        if not sequence:
            raise NoQuestionsAvailableError("No questions available for this session")

        self.progress = SessionSnapshot(
            current_question_index=0,
            current_mode=mode,
            user_answers=[],
            quiz_start_time=self.clock(),
            current_quiz_questions=sequence,
        )
        self.gateway.save_progress(self.progress)
        logger.info("Started %s session with %d questions", mode, len(sequence))
        return self.progress

    def get_current_question(self) -> Optional[Question]:
        if self.progress is None:
            return None
        idx = self.progress.current_question_index
        if 0 <= idx < len(self.progress.current_quiz_questions):
            return self.progress.current_quiz_questions[idx]
        return None

    def submit_answer(self, user_answer: Answer) -> bool:
        """Score ``user_answer`` for the current question.

        Returns True when correct. Returns False without recording anything
        when there is no current question.
        """
        question = self.get_current_question()
        if question is None:
            logger.warning("Answer submitted with no current question; ignoring")
            return False

        is_correct = is_answer_correct(question, user_answer)
        self.progress.user_answers.append(
            UserAnswer(
                question_id=question.id,
                user_answer=copy_answer(user_answer),
                is_correct=is_correct,
                timestamp=self.clock(),
            )
        )
        self.ledger.record_answer(is_correct)
        if not is_correct:
            self.ledger.record_miss(question, user_answer)
        self.gateway.save_progress(self.progress)
        return is_correct

    def advance(self) -> bool:
        """Move to the next question; False means the caller should ``finish``."""
        if self.progress is None:
            return False
        self.progress.current_question_index += 1
        self.gateway.save_progress(self.progress)
        return self.progress.current_question_index < len(self.progress.current_quiz_questions)

    def finish(self) -> SessionSummary:
        progress = self.progress
        minutes = 0
        if progress is not None and progress.quiz_start_time:
            elapsed = max(0, self.clock() - progress.quiz_start_time)
            minutes = _round_half_up(elapsed / MS_PER_MINUTE)
        self.ledger.add_study_time(minutes)

        answers = progress.user_answers if progress is not None else []
        correct = sum(1 for a in answers if a.is_correct)
        accuracy = _round_half_up(correct / len(answers) * 100) if answers else 0
        summary = SessionSummary(correct=correct, total=len(answers), accuracy=accuracy, minutes=minutes)

        self.gateway.clear_progress()
        self.progress = None
        logger.info(
            "Session finished: %d/%d correct (%d%%) in %d min",
            summary.correct, summary.total, summary.accuracy, summary.minutes,
        )
        return summary

    def discard(self) -> None:
        """Drop the session in progress without crediting study time."""
        self.progress = None
        self.gateway.clear_progress()

    def has_resumable_session(self) -> bool:
        return self.gateway.has_resumable_progress()

    def restore(self) -> bool:
        """Load the stored snapshot into memory.

        Returns True when the restored session still has a current question.
        A corrupt snapshot is discarded and leaves the engine Idle.
        """
        snapshot = self.gateway.load_progress()
        if snapshot is None:
            return False
        if not snapshot.current_quiz_questions:
            self.gateway.clear_progress()
            return False
        self.progress = snapshot
        logger.info(
            "Restored %s session at question %d of %d",
            snapshot.current_mode,
            snapshot.current_question_index + 1,
            len(snapshot.current_quiz_questions),
        )
        return snapshot.is_resumable()

    def get_progress(self) -> QuestionProgress:
        if self.progress is None or not self.progress.current_quiz_questions:
            return QuestionProgress(current=0, total=0, percentage=0.0)
        total = len(self.progress.current_quiz_questions)
        current = self.progress.current_question_index + 1
        return QuestionProgress(current=current, total=total, percentage=current / total * 100)
