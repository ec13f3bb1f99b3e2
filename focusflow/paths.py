"""Filesystem locations shared by the settings, timer state, database,
sound cache and log file."""

from pathlib import Path

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusFlow"
LOG_DIR = APP_SUPPORT_DIR / "logs"
LOG_FILE = LOG_DIR / "focusflow.log"
