"""Transition cues synthesized with numpy and played with QSoundEffect.

Every cue is generated once as a 16-bit mono WAV file and cached under
the app-support directory, so later launches only load files.

Sound names
-----------
- ``focus_start``     800 Hz blip
- ``focus_end``       600 Hz blip
- ``break_start``     400 Hz bell with a soft overtone
- ``break_end``       500 Hz blip
- ``cycle_complete``  ascending C-E-G-C arpeggio
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..paths import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "focus_start",
    "focus_end",
    "break_start",
    "break_end",
    "cycle_complete",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _exp_decay(length: int, floor: float = 0.001) -> np.ndarray:
    """Exponential fade from 1.0 down to *floor* across *length* samples."""
    return np.geomspace(1.0, floor, length) if length > 0 else np.ones(0)


def _attack(samples: np.ndarray, attack: int = 120) -> np.ndarray:
    """Short linear fade-in so playback starts without a click."""
    a = min(attack, len(samples))
    out = samples.copy()
    if a > 0:
        out[:a] *= np.linspace(0.0, 1.0, a)
    return out


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _blip(freq: float, duration_s: float = 0.3) -> bytes:
    tone = _sine(freq, duration_s) * 0.3
    return _to_wav_bytes(_attack(tone * _exp_decay(len(tone))))


def _generate_focus_start() -> bytes:
    return _blip(800.0)


def _generate_focus_end() -> bytes:
    return _blip(600.0)


def _generate_break_end() -> bytes:
    return _blip(500.0)


def _generate_break_start() -> bytes:
    """Slow bell: 400 Hz with an octave overtone and a long tail."""
    duration = 1.0
    bell = _sine(400.0, duration) * 0.35 + _sine(800.0, duration) * 0.08
    return _to_wav_bytes(_attack(bell * _exp_decay(len(bell)), attack=3000))


def _generate_cycle_complete() -> bytes:
    notes = [523.25, 659.25, 783.99, 1046.50]  # C5, E5, G5, C6
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        last = i == len(notes) - 1
        tone = _sine(freq, 0.35 if last else 0.1) * 0.5
        parts.append(_attack(tone * _exp_decay(len(tone), 0.01 if last else 0.2)))
        if not last:
            parts.append(np.zeros(int(SAMPLE_RATE * 0.02)))
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "focus_start": _generate_focus_start,
    "focus_end": _generate_focus_end,
    "break_start": _generate_break_start,
    "break_end": _generate_break_end,
    "cycle_complete": _generate_cycle_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Caches, loads and plays the transition cues.

    Satisfies the dispatcher's ``play(name)`` contract.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("focus_end")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.exception("Could not write sound cache in %s", self._sounds_dir)

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
