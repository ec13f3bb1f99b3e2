"""Timer presets: named (focus, break, cycles) triples.

Built-ins
---------
    Pomodoro   25 / 5  x4
    52/17      52 / 17 x4
    90/20      90 / 20 x4
    20/20/20   20 / 2  x4

A "Custom" preset is built from user input by :func:`resolve_custom`.
Out-of-range values are clamped to the nearest bound, never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass


# ── limits ────────────────────────────────────────────────────────────────

FOCUS_RANGE = (1, 180)   # minutes
BREAK_RANGE = (1, 60)    # minutes
CYCLES_RANGE = (1, 10)

CUSTOM_NAME = "Custom"


@dataclass(frozen=True)
class Preset:
    name: str
    focus_minutes: int
    break_minutes: int
    cycles: int


PRESETS: tuple[Preset, ...] = (
    Preset("Pomodoro", 25, 5, 4),
    Preset("52/17", 52, 17, 4),
    Preset("90/20", 90, 20, 4),
    Preset("20/20/20", 20, 2, 4),
)

DEFAULT_PRESET = PRESETS[0]


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(int(value), high))


def list_presets() -> tuple[Preset, ...]:
    """Built-in presets in display order."""
    return PRESETS


def resolve_custom(focus_minutes: int, break_minutes: int, cycles: int) -> Preset:
    """Build the "Custom" preset, clamping every field into range."""
    return Preset(
        CUSTOM_NAME,
        _clamp(focus_minutes, FOCUS_RANGE),
        _clamp(break_minutes, BREAK_RANGE),
        _clamp(cycles, CYCLES_RANGE),
    )


def get_preset(
    name: str,
    custom: tuple[int, int, int] | None = None,
) -> Preset:
    """Look a preset up by name.

    ``"Custom"`` is resolved from *custom* (``(focus, break, cycles)``).
    Unknown names fall back to :data:`DEFAULT_PRESET`.
    """
    if name == CUSTOM_NAME and custom is not None:
        return resolve_custom(*custom)
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return DEFAULT_PRESET
