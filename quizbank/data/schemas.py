"""Data schemas for the quiz engine.

Every record converts to and from the camelCase JSON shape kept in the
key-value store, so ``Record.from_dict(record.to_dict()) == record``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

SINGLE = "single"
MULTIPLE = "multiple"
JUDGE = "judge"
QUESTION_TYPES = (SINGLE, MULTIPLE, JUDGE)

MODE_RANDOM = "random"
MODE_WRONG = "wrong"
QUIZ_MODES = (MODE_RANDOM, MODE_WRONG)

QuestionId = Union[int, str]
Answer = Union[str, List[str]]


def copy_answer(answer: Any) -> Any:
    if isinstance(answer, (list, tuple)):
        return list(answer)
    return answer


@dataclass(frozen=True)
class Option:
    key: str
    value: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "value": self.value}

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "Option":
        return Option(key=str(payload["key"]), value=str(payload.get("value") or ""))


@dataclass(frozen=True)
class Question:
    """One bank entry.

    ``answer`` is a single option key for single/judge questions and an
    ascending list of option keys for multiple-choice questions.
    """
    id: QuestionId
    type: str
    question: str
    options: List[Option]
    answer: Answer
    explanation: str = ""
    score: Union[int, float] = 1
    category: str = ""
    source: str = ""

    @property
    def option_keys(self) -> List[str]:
        return [opt.key for opt in self.options]

    def answer_keys(self) -> List[str]:
        if isinstance(self.answer, list):
            return list(self.answer)
        return [self.answer]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "options": [opt.to_dict() for opt in self.options],
            "answer": copy_answer(self.answer),
            "explanation": self.explanation,
            "score": self.score,
            "category": self.category,
            "source": self.source,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "Question":
        return Question(
            id=payload["id"],
            type=payload.get("type", SINGLE),
            question=payload["question"],
            options=[Option.from_dict(o) for o in payload.get("options", [])],
            answer=copy_answer(payload["answer"]),
            explanation=payload.get("explanation") or "",
            score=payload.get("score") or 1,
            category=payload.get("category") or "",
            source=payload.get("source") or "",
        )


@dataclass
class WrongQuestion:
    """Ledger entry for a question answered incorrectly at least once."""
    question_id: QuestionId
    user_answer: Answer
    correct_answer: Answer
    timestamp: int
    attempts: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "userAnswer": copy_answer(self.user_answer),
            "correctAnswer": copy_answer(self.correct_answer),
            "timestamp": self.timestamp,
            "attempts": self.attempts,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "WrongQuestion":
        return WrongQuestion(
            question_id=payload["questionId"],
            user_answer=copy_answer(payload.get("userAnswer")),
            correct_answer=copy_answer(payload.get("correctAnswer")),
            timestamp=int(payload.get("timestamp") or 0),
            attempts=int(payload.get("attempts") or 1),
        )


@dataclass
class UserAnswer:
    question_id: QuestionId
    user_answer: Answer
    is_correct: bool
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "userAnswer": copy_answer(self.user_answer),
            "isCorrect": self.is_correct,
            "timestamp": self.timestamp,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "UserAnswer":
        return UserAnswer(
            question_id=payload["questionId"],
            user_answer=copy_answer(payload.get("userAnswer")),
            is_correct=bool(payload.get("isCorrect")),
            timestamp=int(payload.get("timestamp") or 0),
        )


@dataclass
class Stats:
    """Lifetime aggregate counters. ``study_time`` is in minutes."""
    total_answered: int = 0
    correct_answers: int = 0
    study_time: int = 0

    @property
    def correct_rate(self) -> int:
        if self.total_answered == 0:
            return 0
        return int(self.correct_answers / self.total_answered * 100 + 0.5)

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalAnswered": self.total_answered,
            "correctAnswers": self.correct_answers,
            "studyTime": self.study_time,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "Stats":
        # Shallow merge onto defaults: missing keys keep their default value
        merged = {**Stats().to_dict(), **{k: v for k, v in payload.items() if v is not None}}
        return Stats(
            total_answered=int(merged["totalAnswered"]),
            correct_answers=int(merged["correctAnswers"]),
            study_time=int(merged["studyTime"]),
        )


@dataclass
class SessionSnapshot:
    """Resumability record for the session in progress."""
    current_question_index: int = 0
    current_mode: str = MODE_RANDOM
    user_answers: List[UserAnswer] = field(default_factory=list)
    quiz_start_time: Optional[int] = None
    current_quiz_questions: List[Question] = field(default_factory=list)

    def is_resumable(self) -> bool:
        return bool(self.current_quiz_questions) and (
            self.current_question_index < len(self.current_quiz_questions)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentQuestionIndex": self.current_question_index,
            "currentMode": self.current_mode,
            "userAnswers": [ua.to_dict() for ua in self.user_answers],
            "quizStartTime": self.quiz_start_time,
            "currentQuizQuestions": [q.to_dict() for q in self.current_quiz_questions],
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "SessionSnapshot":
        return SessionSnapshot(
            current_question_index=int(payload.get("currentQuestionIndex") or 0),
            current_mode=payload.get("currentMode") or MODE_RANDOM,
            user_answers=[UserAnswer.from_dict(a) for a in payload.get("userAnswers") or []],
            quiz_start_time=payload.get("quizStartTime"),
            current_quiz_questions=[
                Question.from_dict(q) for q in payload.get("currentQuizQuestions") or []
            ],
        )


@dataclass(frozen=True)
class QuestionProgress:
    current: int
    total: int
    percentage: float


@dataclass(frozen=True)
class SessionSummary:
    """Outcome of a finished session, shown to the user on completion."""
    correct: int
    total: int
    accuracy: int
    minutes: int
