from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Any, List

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from quizbank.app import QuizApp  # noqa: E402
from quizbank.data.parser import parse_rows  # noqa: E402
from quizbank.storage.gateway import PersistenceGateway  # noqa: E402
from quizbank.storage.store import MemoryStore  # noqa: E402

HEADER = [
    "序号", "一级纲要", "二级纲要", "题目分类", "题型", "题干",
    "选项", "答案", "题目依据", "试题分数", "", "", "", "判断题解析",
]

START_MS = 1_700_000_000_000


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 0, minutes: float = 0) -> None:
        self.now += int(ms + minutes * 60_000)


def make_row(
    qid: Any = None,
    qtype: str = "单选题",
    prompt: str = "Question?",
    options: str = "A-yes|B-no",
    answer: Any = "A",
    category: str = "",
    source: str = "",
    score: Any = None,
    explanation: Any = None,
) -> List[Any]:
    return [qid, "", "", category, qtype, prompt, options, answer, source, score, None, None, None, explanation]


# ====================
# Bank Fixtures
# ====================

@pytest.fixture
def sample_rows():
    """Header plus one single, one multiple and one judge question."""
    return [
        HEADER,
        make_row(1, "单选题", "What is 2 + 2?", "A-3|B-4|C-5", "B",
                 category="arithmetic", source="workbook p.1", score=2),
        make_row(2, "多选题", "Which numbers are prime?", "A-2|B-4|C-3|D-9", "CA",
                 category="arithmetic"),
        make_row(3, "判断题", "The sky is blue on a clear day.", "A-正确|B-错误", "A",
                 explanation="Rayleigh scattering"),
    ]


@pytest.fixture
def sample_questions(sample_rows):
    return parse_rows(sample_rows)


@pytest.fixture
def sample_xlsx(tmp_path, sample_rows):
    """Write the sample bank to a real .xlsx file."""
    path = tmp_path / "bank.xlsx"
    pd.DataFrame(sample_rows).to_excel(path, header=False, index=False)
    return path


# ====================
# Store / App Fixtures
# ====================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gateway(store):
    return PersistenceGateway(store)


@pytest.fixture
def app(store, clock, sample_questions):
    quiz = QuizApp(store=store, clock=clock, rng=random.Random(7))
    quiz.set_questions(sample_questions)
    return quiz


def _answer_for(question, correct: bool = True):
    if correct:
        return list(question.answer) if isinstance(question.answer, list) else question.answer
    wrong = [k for k in question.option_keys if k not in question.answer_keys()]
    return [wrong[0]] if question.type == "multiple" else wrong[0]


@pytest.fixture
def answer_for():
    """Build a submission that is (in)correct for a question."""
    return _answer_for

