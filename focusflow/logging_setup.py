"""File logging for FocusFlow.

Everything under the ``focusflow`` logger goes to a rotating file in the
app-support directory::

    ~/Library/Application Support/FocusFlow/logs/focusflow.log
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import LOG_FILE


def setup_logger(log_file: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    log_file = log_file or LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("focusflow")
    logger.setLevel(level)

    if not logger.handlers:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=1_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    return logger
