"""Composition root for FocusFlow: a menu-bar (tray) application.

``FocusFlowApp`` owns the single :class:`TimerEngine` and wires it to
persistence, the side-effect dispatcher, sounds, stats and the tray
icon.  Nothing else creates timer state.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from PyQt6.QtCore import QObject, Qt
from PyQt6.QtGui import (
    QAction, QActionGroup, QColor, QIcon, QImage, QPainter, QPen, QPixmap,
)
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .audio.sounds import SoundManager
from .effects.dispatcher import SideEffectDispatcher
from .settings import Settings, load_settings, save_settings
from .stats.recorder import StatsRecorder
from .timer.engine import TimerEngine
from .timer.presets import CUSTOM_NAME, list_presets, resolve_custom
from .timer.state import EngineStatus, Mode
from .timer.store import TimerStateStore

logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(status: EngineStatus, mode: Mode) -> QIcon:
    """32×32 monochrome template icon.

    - IDLE:            thin circle outline
    - RUNNING focus:   filled circle
    - RUNNING break:   outline with a centre dot
    - PAUSED:          two vertical pause bars
    """
    size = 64  # drawn at 2x for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(colour)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if status == EngineStatus.PAUSED:
        bar_w, bar_h, gap = 8, 28, 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    elif status == EngineStatus.RUNNING and mode == Mode.FOCUS:
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if status == EngineStatus.RUNNING:
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(colour)
            dot_r = 6
            p.drawEllipse(cx - dot_r, cy - dot_r, dot_r * 2, dot_r * 2)

    p.end()
    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


def _fmt_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m}:{s:02d}"


class FocusFlowApp(QObject):
    """Owns the engine and everything hanging off it."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        store: TimerStateStore | None = None,
        recorder: StatsRecorder | None = None,
        sounds: SoundManager | None = None,
        clock: Callable[[], float] = time.time,
        permission: Callable[[], bool] | None = None,
        persist_settings: bool = True,
    ) -> None:
        super().__init__(parent)

        # ── settings ──────────────────────────────────────────────────
        self._settings = settings or load_settings()
        self._persist_settings = persist_settings

        # ── collaborators ─────────────────────────────────────────────
        self._store = store or TimerStateStore()
        self._recorder = recorder or StatsRecorder()
        if sounds is None:
            sounds = SoundManager(parent=self)
            sounds.set_volume(self._settings.sound_volume)
            sounds.set_enabled(self._settings.sound_enabled)
        self._sounds = sounds

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_tray_icon(EngineStatus.IDLE, Mode.FOCUS))
        self._tray_icon.setToolTip("FocusFlow")

        # ── engine + dispatcher ───────────────────────────────────────
        self._engine = TimerEngine(
            self,
            preset=self._settings.preset(),
            store=self._store,
            clock=clock,
            auto_start_breaks=self._settings.auto_start_breaks,
            auto_start_work=self._settings.auto_start_work,
        )
        self._dispatcher = SideEffectDispatcher(
            self._settings,
            sounds=self._sounds,
            notifier=self._send_notification,
            recorder=self._recorder,
            permission=permission or QSystemTrayIcon.supportsMessages,
            clock=clock,
        )

        self._build_tray_menu()

        # ── wire signals ──────────────────────────────────────────────
        self._engine.transition.connect(self._dispatcher.on_transition)
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.remaining_changed.connect(self._on_remaining_changed)
        self._engine.resynchronized.connect(self._on_resynchronized)

        # ── recover the previous session (may replay phases) ──────────
        self._engine.restore()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def recorder(self) -> StatsRecorder:
        return self._recorder

    def show(self) -> None:
        self._tray_icon.show()

    def toggle_start(self) -> None:
        """Start, pause or resume depending on the current status."""
        if self._engine.is_running:
            self._engine.pause()
        else:
            self._engine.start()

    def select_preset(self, name: str) -> None:
        self._settings.preset_name = name
        self._save_settings()
        self._engine.set_preset(self._settings.preset())

    def set_custom_preset(self, focus_minutes: int, break_minutes: int, cycles: int) -> None:
        """Store (clamped) custom values and switch to the Custom preset."""
        preset = resolve_custom(focus_minutes, break_minutes, cycles)
        self._settings.custom_focus_minutes = preset.focus_minutes
        self._settings.custom_break_minutes = preset.break_minutes
        self._settings.custom_cycles = preset.cycles
        self.select_preset(CUSTOM_NAME)

    def apply_settings(self, settings: Settings) -> None:
        """Adopt edited settings.

        The running phase is left alone unless the preset changed, in which
        case the timer is reset onto the new one.
        """
        self._settings = settings
        self._dispatcher.settings = settings
        self._engine.auto_start_breaks = settings.auto_start_breaks
        self._engine.auto_start_work = settings.auto_start_work
        self._sounds.set_volume(settings.sound_volume)
        self._sounds.set_enabled(settings.sound_enabled)
        preset = settings.preset()
        if preset != self._engine.preset:
            self._engine.set_preset(preset)
        self._save_settings()

    def reset_all_data(self) -> None:
        """Forget the timer and every recorded session."""
        logger.info("Resetting all data")
        self._recorder.clear()
        self._engine.reset_all()

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu()

        self._start_action = menu.addAction("Start")
        self._start_action.triggered.connect(self.toggle_start)

        reset_action = menu.addAction("Reset")
        reset_action.triggered.connect(lambda: self._engine.reset())

        presets_menu = menu.addMenu("Preset")
        group = QActionGroup(presets_menu)
        names = [p.name for p in list_presets()] + [CUSTOM_NAME]
        for name in names:
            action = QAction(name, presets_menu)
            action.setCheckable(True)
            action.setChecked(name == self._engine.preset.name)
            action.triggered.connect(lambda _checked, n=name: self.select_preset(n))
            group.addAction(action)
            presets_menu.addAction(action)

        menu.addSeparator()

        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._tray_menu = menu
        self._tray_icon.setContextMenu(menu)

    def _send_notification(self, title: str, body: str, category: str) -> None:
        logger.debug("Notification [%s]: %s", category, title)
        self._tray_icon.showMessage(
            title, body, QSystemTrayIcon.MessageIcon.Information, 5000,
        )

    def _quit_app(self) -> None:
        # A running timer keeps its anchor on disk and is caught up on
        # next launch.
        self._tray_icon.hide()
        app = QApplication.instance()
        if app is not None:
            app.quit()

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, status: EngineStatus) -> None:
        self._tray_icon.setIcon(_make_tray_icon(status, self._engine.mode))
        if status == EngineStatus.RUNNING:
            self._start_action.setText("Pause")
        elif status == EngineStatus.PAUSED and self._engine.state.accumulated > 0:
            self._start_action.setText("Resume")
        else:
            self._start_action.setText("Start")

    def _on_remaining_changed(self, remaining: int) -> None:
        label = "Focus" if self._engine.mode == Mode.FOCUS else "Break"
        self._tray_icon.setToolTip(
            f"FocusFlow: {label} {_fmt_time(remaining)} "
            f"(cycle {self._engine.current_cycle}/{self._engine.max_cycles})"
        )

    def _on_resynchronized(self) -> None:
        if not self._dispatcher.should_notify():
            return
        self._send_notification(
            "Timer resynchronized",
            "You were away for a while, so the timer was stopped.",
            "resynchronized",
        )

    # ── helpers ───────────────────────────────────────────────────────

    def _save_settings(self) -> None:
        if not self._persist_settings:
            return
        try:
            save_settings(self._settings)
        except OSError:
            logger.exception("Failed to save settings")
