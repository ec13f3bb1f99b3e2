"""Side effects fired on timer transitions."""

from .dispatcher import SideEffectDispatcher, DEBOUNCE_SECONDS
from .quiet_hours import in_quiet_hours, parse_hhmm

__all__ = [
    "SideEffectDispatcher",
    "DEBOUNCE_SECONDS",
    "in_quiet_hours",
    "parse_hhmm",
]
