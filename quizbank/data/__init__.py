"""Question bank records and ingestion."""

from .parser import MalformedSourceError, load_bank, parse_rows, read_workbook
from .schemas import (
    Option,
    Question,
    QuestionProgress,
    SessionSnapshot,
    SessionSummary,
    Stats,
    UserAnswer,
    WrongQuestion,
)

__all__ = [
    "Option",
    "Question",
    "QuestionProgress",
    "SessionSnapshot",
    "SessionSummary",
    "Stats",
    "UserAnswer",
    "WrongQuestion",
    "MalformedSourceError",
    "load_bank",
    "parse_rows",
    "read_workbook",
]
