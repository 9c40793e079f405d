"""Command-line front end for quizbank.

The CLI only renders state and forwards user intent to ``QuizApp``.
"""

from .main import main

__all__ = ["main"]
