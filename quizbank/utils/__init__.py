"""Utilities for quizbank."""

from .determinism import set_determinism
from .logging import setup_logging

__all__ = [
    "setup_logging",
    "set_determinism",
]
