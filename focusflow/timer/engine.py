"""Wall-clock anchored focus/break state machine for FocusFlow.

Statuses
--------
IDLE      Nothing started yet: first launch, "reset all data", or a
          catch-up that had to resynchronize.
RUNNING   Counting down; ``anchor`` holds the wall-clock start instant.
PAUSED    Stopped inside the loop: part-way through a phase, after a
          reset, or at a phase boundary waiting for the user.

Transitions
-----------
IDLE | PAUSED → RUNNING                       (start)
RUNNING → PAUSED                              (pause)
any → PAUSED (Focus, cycle 1)                 (reset / set_preset)
any → IDLE (Focus, cycle 1)                   (reset_all)
RUNNING → next phase, running or paused       (remaining reaches 0)

Phase order
-----------
Focus → Break → Focus (cycle + 1) → … → Break of the last cycle →
Focus (cycle 1).  The loop never ends; it restarts with the same preset.

Time keeping
------------
Remaining time is never decremented.  Every tick recomputes it as
``total - (accumulated + now - anchor)``, so missed or late ticks cost
nothing.  When several phases ended while no tick arrived (sleep, quit),
the catch-up loop replays each boundary in order, anchoring every new
phase at the exact instant the previous one ended.  Boundaries crossed
during ``restore``, and every boundary of a live catch-up except the
last, are emitted with ``replayed=True``.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from datetime import datetime
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .presets import DEFAULT_PRESET, Preset
from .state import (
    EngineStatus,
    Mode,
    SessionRecord,
    TimerState,
    TransitionEvent,
    TransitionKind,
)
from .store import TimerStateStore

logger = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000
MIN_PHASE_SECONDS = 60      # zero-length phases would never advance
MAX_CATCH_UP_STEPS = 1000

_STARTED = {
    Mode.FOCUS: TransitionKind.FOCUS_STARTED,
    Mode.BREAK: TransitionKind.BREAK_STARTED,
}
_ENDED = {
    Mode.FOCUS: TransitionKind.FOCUS_ENDED,
    Mode.BREAK: TransitionKind.BREAK_ENDED,
}


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Persistent Pomodoro-style timer.

    One instance is owned by the application and handed to whatever
    needs it.  Every mutation is written through *store*.

    Signals
    -------
    remaining_changed(remaining_seconds: int)
        Emitted on every tick and after every mutation.
    state_changed(status: EngineStatus)
        Emitted after every mutation.
    transition(event: TransitionEvent)
        Emitted for each phase start/end and each completed loop.
    session_completed(record: SessionRecord)
        Emitted when a phase runs to zero (never for reset phases).
    resynchronized()
        Emitted when catch-up gave up and stopped at a phase boundary.
    """

    remaining_changed = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    transition = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    resynchronized = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        preset: Preset = DEFAULT_PRESET,
        store: TimerStateStore | None = None,
        clock: Callable[[], float] = time.time,
        auto_start_breaks: bool = True,
        auto_start_work: bool = False,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._preset = preset
        self._store = store
        self._clock = clock
        self._auto_start_breaks = auto_start_breaks
        self._auto_start_work = auto_start_work

        # ── state ─────────────────────────────────────────────────────
        self._state = self._fresh_state(preset)
        self._idle = True
        self._sequence = 0
        self._restoring = False
        self._replaying = False

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        """A copy of the current state (safe to inspect, not to mutate)."""
        return dataclasses.replace(self._state)

    @property
    def status(self) -> EngineStatus:
        if self._state.is_running:
            return EngineStatus.RUNNING
        if self._idle:
            return EngineStatus.IDLE
        return EngineStatus.PAUSED

    @property
    def mode(self) -> Mode:
        return self._state.mode

    @property
    def remaining(self) -> int:
        """Whole seconds left, rounded up so 0 means the phase is over."""
        return math.ceil(self._state.remaining(self._clock()))

    @property
    def total_seconds(self) -> int:
        return self._state.total_seconds

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        total = self._state.total_seconds
        if total <= 0:
            return 0.0
        return max(0.0, min(1.0, self._state.elapsed(self._clock()) / total))

    @property
    def current_cycle(self) -> int:
        return self._state.current_cycle

    @property
    def max_cycles(self) -> int:
        return self._state.max_cycles

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def preset(self) -> Preset:
        return self._preset

    @property
    def auto_start_breaks(self) -> bool:
        return self._auto_start_breaks

    @auto_start_breaks.setter
    def auto_start_breaks(self, value: bool) -> None:
        self._auto_start_breaks = value

    @property
    def auto_start_work(self) -> bool:
        return self._auto_start_work

    @auto_start_work.setter
    def auto_start_work(self, value: bool) -> None:
        self._auto_start_work = value

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start or resume the current phase.  No-op while running."""
        if self._state.is_running:
            return
        now = self._clock()
        fresh = self._state.accumulated <= 0

        self._state.is_running = True
        self._state.anchor = now
        self._qt_timer.start()
        self._idle = False

        if fresh:
            self._emit_transition(
                _STARTED[self._state.mode],
                self._state.mode,
                self._state.current_cycle,
                now,
            )
        self._commit()

    def pause(self) -> None:
        """Bank the elapsed time and stop.  Calling it twice is harmless."""
        if not self._state.is_running:
            return
        now = self._clock()

        # The phase may already be over without a tick having noticed.
        self._catch_up(now)
        if not self._state.is_running:
            return

        self._state.accumulated = self._state.elapsed(now)
        self._state.is_running = False
        self._state.anchor = None
        self._qt_timer.stop()
        self._commit()

    def reset(self, preset: Preset | None = None) -> None:
        """Return to a paused Focus phase at cycle 1.

        When *preset* is given it replaces the current one; the phase
        lengths and loop size come from it from now on.
        """
        if preset is not None:
            self._preset = preset
        self._qt_timer.stop()
        self._state = self._fresh_state(self._preset)
        self._idle = False
        self._commit()

    def set_preset(self, preset: Preset) -> None:
        self.reset(preset)

    def tick(self) -> None:
        """Recompute remaining time; advance phases that have ended.

        Called by the internal 1 Hz ``QTimer``.  Not reentrant.
        """
        if not self._state.is_running:
            return
        if self._catch_up(self._clock()) == 0:
            self.remaining_changed.emit(self.remaining)

    def restore(self) -> None:
        """Load persisted state and fast-forward through any phases that
        ended while the process was not running.

        Call once, after the dispatcher is connected, so replayed phases
        are still recorded.
        """
        loaded = self._store.load() if self._store is not None else None
        if loaded is None:
            self._state = self._fresh_state(self._preset)
            self._idle = True
            self._commit()
            return

        self._state = self._sanitize(loaded)
        self._idle = self._looks_untouched(self._state)
        if self._state.is_running:
            self._restoring = True
            try:
                self._catch_up(self._clock())
            finally:
                self._restoring = False
        if self._state.is_running:
            self._qt_timer.start()
        self._commit()

    def reset_all(self) -> None:
        """Forget the stored timer and start over from the preset."""
        self._qt_timer.stop()
        if self._store is not None:
            self._store.clear()
        self._state = self._fresh_state(self._preset)
        self._idle = True
        self._commit()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: PHASE MECHANICS
    # ══════════════════════════════════════════════════════════════════

    def _catch_up(self, now: float) -> int:
        """Apply every phase transition due at *now*.  Returns the count."""
        steps = 0
        while self._state.is_running and self._state.remaining(now) <= 0:
            if steps >= MAX_CATCH_UP_STEPS:
                self._resynchronize(steps)
                break
            s = self._state
            boundary = s.anchor + (s.total_seconds - s.accumulated)
            # Only the boundary the user is crossing right now is live.
            self._replaying = (
                self._restoring or self._next_phase_over(boundary, now)
            )
            self._complete_phase(boundary)
            steps += 1
        self._replaying = False

        if steps:
            if not self._state.is_running:
                self._qt_timer.stop()
            self._commit()
        return steps

    def _complete_phase(self, boundary: float) -> None:
        s = self._state
        record = SessionRecord(
            phase=s.mode,
            duration_minutes=s.total_seconds // 60,
            completed_at=datetime.fromtimestamp(boundary),
        )
        self._emit_transition(
            _ENDED[s.mode], s.mode, s.current_cycle, boundary, record,
        )
        self.session_completed.emit(record)

        if s.mode == Mode.FOCUS:
            s.mode = Mode.BREAK
            s.total_seconds = self._phase_seconds(self._preset.break_minutes)
            auto = self._auto_start_breaks
        else:
            if s.current_cycle >= s.max_cycles:
                self._emit_transition(
                    TransitionKind.CYCLE_COMPLETED,
                    Mode.BREAK,
                    s.current_cycle,
                    boundary,
                )
                s.current_cycle = 1
            else:
                s.current_cycle += 1
            s.mode = Mode.FOCUS
            s.total_seconds = self._phase_seconds(self._preset.focus_minutes)
            auto = self._auto_start_work

        s.accumulated = 0.0
        self._idle = False
        if auto:
            s.is_running = True
            s.anchor = boundary
            self._emit_transition(
                _STARTED[s.mode], s.mode, s.current_cycle, boundary,
            )
        else:
            s.is_running = False
            s.anchor = None

    def _resynchronize(self, steps: int) -> None:
        logger.warning(
            "Timer catch-up stopped after %d transitions; "
            "resynchronizing at the current phase boundary",
            steps,
        )
        self._state.is_running = False
        self._state.anchor = None
        self._state.accumulated = 0.0
        self._idle = True
        self.resynchronized.emit()

    def _emit_transition(
        self,
        kind: TransitionKind,
        mode: Mode,
        cycle: int,
        at: float,
        record: SessionRecord | None = None,
    ) -> None:
        self._sequence += 1
        self.transition.emit(TransitionEvent(
            kind=kind,
            mode=mode,
            cycle=cycle,
            sequence=self._sequence,
            occurred_at=datetime.fromtimestamp(at),
            record=record,
            replayed=self._replaying,
        ))

    def _commit(self) -> None:
        if self._store is not None:
            self._store.save(self._state)
        self.state_changed.emit(self.status)
        self.remaining_changed.emit(self.remaining)

    # ── helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _phase_seconds(minutes: int) -> int:
        return max(MIN_PHASE_SECONDS, minutes * 60)

    def _fresh_state(self, preset: Preset) -> TimerState:
        return TimerState(
            mode=Mode.FOCUS,
            total_seconds=self._phase_seconds(preset.focus_minutes),
            current_cycle=1,
            max_cycles=max(1, preset.cycles),
        )

    def _sanitize(self, state: TimerState) -> TimerState:
        """Clamp a loaded record back inside the engine's invariants."""
        state.total_seconds = max(MIN_PHASE_SECONDS, state.total_seconds)
        state.max_cycles = max(1, state.max_cycles)
        state.current_cycle = max(1, min(state.current_cycle, state.max_cycles))
        state.accumulated = max(0.0, min(state.accumulated, state.total_seconds))
        return state

    def _next_phase_over(self, boundary: float, now: float) -> bool:
        """Would the phase that follows *boundary* already be over at *now*?"""
        if self._state.mode == Mode.FOCUS:
            auto, minutes = self._auto_start_breaks, self._preset.break_minutes
        else:
            auto, minutes = self._auto_start_work, self._preset.focus_minutes
        return auto and boundary + self._phase_seconds(minutes) <= now

    @staticmethod
    def _looks_untouched(state: TimerState) -> bool:
        return (
            not state.is_running
            and state.accumulated == 0
            and state.mode == Mode.FOCUS
            and state.current_cycle == 1
        )
