"""Timer package."""

from .engine import (
    TimerEngine,
    MIN_PHASE_SECONDS,
    MAX_CATCH_UP_STEPS,
)
from .presets import (
    Preset,
    DEFAULT_PRESET,
    list_presets,
    resolve_custom,
    get_preset,
)
from .state import (
    TimerState,
    Mode,
    EngineStatus,
    TransitionKind,
    TransitionEvent,
    SessionRecord,
)
from .store import TimerStateStore

__all__ = [
    "TimerEngine",
    "MIN_PHASE_SECONDS",
    "MAX_CATCH_UP_STEPS",
    "Preset",
    "DEFAULT_PRESET",
    "list_presets",
    "resolve_custom",
    "get_preset",
    "TimerState",
    "Mode",
    "EngineStatus",
    "TransitionKind",
    "TransitionEvent",
    "SessionRecord",
    "TimerStateStore",
]
