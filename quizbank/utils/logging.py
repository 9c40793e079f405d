from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path


def setup_logging(log_dir: str = "logs", filename: str = "quizbank.log", level: str = "INFO") -> Logger:
    """Attach console and file handlers to the ``quizbank`` logger.

    The CLI calls this once at startup with the values from
    ``LoggingConfig``. Every module logs through ``getLogger(__name__)``, so
    parser skips, ledger updates and session start/finish all end up in
    ``<log_dir>/<filename>`` as well as on stderr. Embedding code that never
    calls this gets no handlers from quizbank.

    Later calls return the configured logger unchanged. Pass an empty
    ``log_dir`` to log to the console only.
    """
    logger = logging.getLogger("quizbank")
    if getattr(logger, "_configured", False):
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(Path(log_dir) / filename), encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(logger.level)
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    logger._configured = True  # type: ignore[attr-defined]
    logger.debug("Logging to %s", Path(log_dir) / filename if log_dir else "console only")
    return logger
