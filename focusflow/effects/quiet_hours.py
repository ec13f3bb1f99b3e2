"""Quiet-hours window check for notifications.

Windows are given as local ``"HH:MM"`` strings.  Both ends are
inclusive, and a window whose start is later than its end wraps past
midnight (``"22:00"``–``"08:00"``).
"""

from __future__ import annotations

from datetime import time


def parse_hhmm(value: str) -> time:
    """``"07:30"`` → ``time(7, 30)``.  Raises ``ValueError`` if malformed."""
    if not isinstance(value, str):
        raise ValueError(f"expected an HH:MM string, got {value!r}")
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


def in_quiet_hours(now: time, start: str, end: str) -> bool:
    current = now.hour * 60 + now.minute
    start_t = parse_hhmm(start)
    end_t = parse_hhmm(end)
    lo = start_t.hour * 60 + start_t.minute
    hi = end_t.hour * 60 + end_t.minute

    if lo <= hi:
        return lo <= current <= hi
    return current >= lo or current <= hi
