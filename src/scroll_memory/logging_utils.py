"""Logging helpers for scroll_memory."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


def configure_logging(*, level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure loguru to log to stderr, plus a file when one is given."""
    logger.remove()
    logger.add(sys.stderr, level=level, backtrace=False, diagnose=False)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(log_file), level=level, backtrace=False, diagnose=False)
