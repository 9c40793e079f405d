"""quizbank: spreadsheet-driven practice quizzes with a wrong-answer ledger.

Question banks are imported from spreadsheets, practiced in random or
wrong-question sessions, and all state lives in a local key-value store.
"""

from .app import QuizApp
from .config import AppConfig, default_app_config
from .data import Question, load_bank, parse_rows
from .errors import (
    CorruptProgressSnapshotError,
    EmptyBankError,
    EmptyLedgerError,
    MalformedSourceError,
    NoQuestionsAvailableError,
    QuizError,
)
from .ledger import Ledger
from .session import QuizState, SessionEngine
from .storage import JsonFileStore, MemoryStore, PersistenceGateway
from .utils import set_determinism, setup_logging

__all__ = [
    "__version__",
    "AppConfig",
    "default_app_config",
    "QuizApp",
    "Question",
    "load_bank",
    "parse_rows",
    "Ledger",
    "QuizState",
    "SessionEngine",
    "PersistenceGateway",
    "MemoryStore",
    "JsonFileStore",
    "QuizError",
    "EmptyBankError",
    "EmptyLedgerError",
    "NoQuestionsAvailableError",
    "MalformedSourceError",
    "CorruptProgressSnapshotError",
    "setup_logging",
    "set_determinism",
]

__version__ = "0.1.0"
