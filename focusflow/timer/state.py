"""Timer data model: the persisted ``TimerState`` and the records and
events the engine emits.

``TimerState`` is the only durable unit of truth.  Remaining time is
never stored; it is recomputed from the anchor and the banked
``accumulated`` seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class Mode(Enum):
    FOCUS = "focus"
    BREAK = "break"


class EngineStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TransitionKind(Enum):
    FOCUS_STARTED = "focus_started"
    FOCUS_ENDED = "focus_ended"
    BREAK_STARTED = "break_started"
    BREAK_ENDED = "break_ended"
    CYCLE_COMPLETED = "cycle_completed"


@dataclass
class TimerState:
    mode: Mode = Mode.FOCUS
    total_seconds: int = 25 * 60
    is_running: bool = False
    anchor: float | None = None        # wall-clock epoch seconds
    accumulated: float = 0.0           # banked from earlier intervals
    current_cycle: int = 1
    max_cycles: int = 4

    def elapsed(self, now: float) -> float:
        """Seconds elapsed in the current phase at wall-clock *now*."""
        running = 0.0
        if self.is_running and self.anchor is not None:
            # A clock that moved backwards counts as no time passing.
            running = max(0.0, now - self.anchor)
        return max(0.0, self.accumulated + running)

    def remaining(self, now: float) -> float:
        return max(0.0, self.total_seconds - self.elapsed(now))

    # ── JSON record ───────────────────────────────────────────────────

    def to_record(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "totalSeconds": self.total_seconds,
            "isRunning": self.is_running,
            "anchorTimestamp": (
                None if self.anchor is None else int(round(self.anchor * 1000))
            ),
            "accumulatedElapsedSeconds": self.accumulated,
            "currentCycle": self.current_cycle,
            "maxCycles": self.max_cycles,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> TimerState:
        """Parse a JSON record.  Raises ``ValueError`` / ``KeyError`` /
        ``TypeError`` on anything malformed."""
        if not isinstance(data, dict):
            raise TypeError("timer record must be an object")

        is_running = data["isRunning"]
        if not isinstance(is_running, bool):
            raise TypeError("isRunning must be a boolean")

        anchor_ms = data.get("anchorTimestamp")
        if anchor_ms is not None and not isinstance(anchor_ms, (int, float)):
            raise TypeError("anchorTimestamp must be a number or null")
        if is_running and anchor_ms is None:
            raise ValueError("running timer record has no anchor")

        ints = {}
        for key in ("totalSeconds", "currentCycle", "maxCycles"):
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{key} must be an integer")
            ints[key] = value

        accumulated = data.get("accumulatedElapsedSeconds", 0)
        if isinstance(accumulated, bool) or not isinstance(accumulated, (int, float)):
            raise TypeError("accumulatedElapsedSeconds must be a number")

        return cls(
            mode=Mode(data["mode"]),
            total_seconds=ints["totalSeconds"],
            is_running=is_running,
            anchor=None if anchor_ms is None else anchor_ms / 1000.0,
            accumulated=float(accumulated),
            current_cycle=ints["currentCycle"],
            max_cycles=ints["maxCycles"],
        )


@dataclass(frozen=True)
class SessionRecord:
    """One completed phase, handed to the stats recorder."""

    phase: Mode
    duration_minutes: int
    completed_at: datetime


@dataclass(frozen=True)
class TransitionEvent:
    """A state-machine transition the dispatcher reacts to.

    ``sequence`` increases monotonically per engine.  ``replayed`` marks
    boundaries reconstructed on restore or noticed long after they passed.
    """

    kind: TransitionKind
    mode: Mode
    cycle: int
    sequence: int
    occurred_at: datetime
    record: SessionRecord | None = None
    replayed: bool = False

    @property
    def dedup_key(self) -> tuple[TransitionKind, Mode, int]:
        return (self.kind, self.mode, self.cycle)
