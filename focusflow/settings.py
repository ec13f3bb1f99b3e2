"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/FocusFlow/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields

from .paths import APP_SUPPORT_DIR
from .timer.presets import DEFAULT_PRESET, Preset, get_preset

logger = logging.getLogger(__name__)

SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    preset_name: str = DEFAULT_PRESET.name
    custom_focus_minutes: int = 25
    custom_break_minutes: int = 5
    custom_cycles: int = 4
    auto_start_breaks: bool = True
    auto_start_work: bool = False

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True
    do_not_disturb: bool = False
    notify_focus_start: bool = True
    notify_focus_end: bool = True
    notify_break_start: bool = True
    notify_break_end: bool = True
    notify_cycle_complete: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"       # HH:MM, local time
    quiet_hours_end: str = "08:00"

    def preset(self) -> Preset:
        """The currently selected preset (custom values clamped)."""
        return get_preset(
            self.preset_name,
            (
                self.custom_focus_minutes,
                self.custom_break_minutes,
                self.custom_cycles,
            ),
        )


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
