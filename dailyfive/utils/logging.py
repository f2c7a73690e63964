from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path
from typing import Optional

from .logging_config import StructuredFormatter

LOGGER_NAME = "dailyfive"


def setup_logging(
    log_dir: Optional[str] = "logs",
    filename: str = "dailyfive.log",
    level: str = "INFO",
    structured: bool = False,
) -> Logger:
    """Configure dual console/file logging using stdlib logging.

    Creates the logs directory if needed and sets a consistent formatter.
    Passing ``log_dir=None`` logs to the console only. Multiple calls are
    safe; handlers are added only once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_configured", False):
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if structured:
        fmt: logging.Formatter = StructuredFormatter()
    else:
        fmt = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(logger.level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # File handler
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(Path(log_dir) / filename), encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    logger._configured = True  # type: ignore[attr-defined]
    logger.debug("Logging configured")
    return logger


def reset_logging() -> None:
    """Drop handlers installed by ``setup_logging`` (used between CLI runs in tests)."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger._configured = False  # type: ignore[attr-defined]
