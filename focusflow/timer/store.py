"""Durable storage for the engine's ``TimerState``.

The record lives next to the settings file::

    ~/Library/Application Support/FocusFlow/timer_state.json

``load`` never raises: a missing or malformed file yields ``None`` and
the engine starts from the default preset.  ``save`` is fire-and-forget:
a failed write is logged and the in-memory state is kept.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..paths import APP_SUPPORT_DIR
from .state import TimerState

logger = logging.getLogger(__name__)

STATE_PATH = APP_SUPPORT_DIR / "timer_state.json"


class TimerStateStore:
    """JSON-file persistence adapter.

    Usage::

        store = TimerStateStore()
        state = store.load()      # TimerState | None
        store.save(state)
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or STATE_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TimerState | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return TimerState.from_record(data)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable timer state %s: %s", self._path, exc)
            return None

    def save(self, state: TimerState) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(state.to_record(), indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError:
            logger.exception("Failed to save timer state to %s", self._path)

    def clear(self) -> None:
        """Delete the stored record ("reset all data")."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete timer state %s", self._path)
