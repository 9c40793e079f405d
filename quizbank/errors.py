"""Error kinds raised by the quiz engine."""


class QuizError(Exception):
    """Base exception for quiz engine errors."""
    pass


class EmptyBankError(QuizError):
    """Raised when a session is started before any questions are loaded."""
    pass


class EmptyLedgerError(QuizError):
    """Raised when a wrong-question session is started with an empty ledger."""
    pass


class NoQuestionsAvailableError(QuizError):
    """Raised when the computed session sequence is empty."""
    pass


class MalformedSourceError(QuizError):
    """Raised when an uploaded bank cannot be decoded as a spreadsheet."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class CorruptProgressSnapshotError(QuizError):
    """Raised internally when the stored session snapshot fails to parse."""
    pass
