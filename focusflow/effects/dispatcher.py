"""Exactly-once side effects for timer transitions.

``SideEffectDispatcher.on_transition`` is connected to
``TimerEngine.transition``.  Each event maps to at most one sound, one
notification and one stats record:

=================  ================  ======================  =========
event              sound             notification toggle     stats
=================  ================  ======================  =========
FOCUS_STARTED      focus_start       notify_focus_start      –
FOCUS_ENDED        focus_end         notify_focus_end        record
BREAK_STARTED      break_start       notify_break_start      –
BREAK_ENDED        break_end         notify_break_end        record
CYCLE_COMPLETED    cycle_complete    notify_cycle_complete   –
=================  ================  ======================  =========

Deduplication
-------------
- Events are numbered by the engine.  Anything at or below the last
  handled sequence number is dropped outright.
- A live event whose ``(kind, mode, cycle)`` key already fired within
  ``DEBOUNCE_SECONDS`` is dropped too.
- Replayed events (phases that ended while the app was away) are still
  recorded but stay silent.

Do-not-disturb silences both sounds and notifications; quiet hours only
notifications.

Every collaborator call is isolated: a failure is logged and the next
effect still runs.  Nothing here ever raises into the tick loop.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Protocol

from ..settings import Settings
from ..timer.state import SessionRecord, TransitionEvent, TransitionKind
from .quiet_hours import in_quiet_hours

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 1.0


class SoundPlayer(Protocol):
    def play(self, name: str) -> None: ...


class SessionSink(Protocol):
    def record(self, record: SessionRecord) -> None: ...


Notifier = Callable[[str, str, str], None]


_SOUNDS: dict[TransitionKind, str] = {
    TransitionKind.FOCUS_STARTED: "focus_start",
    TransitionKind.FOCUS_ENDED: "focus_end",
    TransitionKind.BREAK_STARTED: "break_start",
    TransitionKind.BREAK_ENDED: "break_end",
    TransitionKind.CYCLE_COMPLETED: "cycle_complete",
}

_TOGGLES: dict[TransitionKind, str] = {
    TransitionKind.FOCUS_STARTED: "notify_focus_start",
    TransitionKind.FOCUS_ENDED: "notify_focus_end",
    TransitionKind.BREAK_STARTED: "notify_break_start",
    TransitionKind.BREAK_ENDED: "notify_break_end",
    TransitionKind.CYCLE_COMPLETED: "notify_cycle_complete",
}


def _message(event: TransitionEvent) -> tuple[str, str]:
    kind = event.kind
    if kind == TransitionKind.FOCUS_STARTED:
        return "Focus session started", f"Cycle {event.cycle}. You've got this."
    if kind == TransitionKind.FOCUS_ENDED:
        return "Focus session complete!", "Great job! Time for a well-deserved break."
    if kind == TransitionKind.BREAK_STARTED:
        return "Break time", "Step away from the screen for a bit."
    if kind == TransitionKind.BREAK_ENDED:
        return "Break time over", "Ready to get back to focused work?"
    return (
        "Cycle complete!",
        f"You've completed {event.cycle} focus sessions. Great work!",
    )


class SideEffectDispatcher:
    """Fans timer transitions out to sound, notification and stats.

    Usage::

        dispatcher = SideEffectDispatcher(
            settings, sounds=sound_mgr, notifier=tray_notify,
            recorder=StatsRecorder(),
        )
        engine.transition.connect(dispatcher.on_transition)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        sounds: SoundPlayer | None = None,
        notifier: Notifier | None = None,
        recorder: SessionSink | None = None,
        permission: Callable[[], bool] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._sounds = sounds
        self._notifier = notifier
        self._recorder = recorder
        self._permission = permission
        self._clock = clock

        self._last_sequence = 0
        self._last_fired: dict[tuple, float] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    @settings.setter
    def settings(self, value: Settings) -> None:
        self._settings = value

    # ── entry point ───────────────────────────────────────────────────

    def on_transition(self, event: TransitionEvent) -> None:
        if event.sequence <= self._last_sequence:
            logger.debug("Dropping already handled transition %s", event)
            return
        self._last_sequence = event.sequence

        if not event.replayed:
            now = self._clock()
            last = self._last_fired.get(event.dedup_key)
            if last is not None and now - last < DEBOUNCE_SECONDS:
                logger.debug("Debounced duplicate transition %s", event)
                return
            self._last_fired[event.dedup_key] = now

        if event.record is not None and self._recorder is not None:
            self._run("record session", self._recorder.record, event.record)

        if event.replayed:
            return

        if self._sounds is not None and not self._settings.do_not_disturb:
            self._run("play sound", self._sounds.play, _SOUNDS[event.kind])

        if self._notifier is not None and self.should_notify(event.kind):
            title, body = _message(event)
            self._run("notify", self._notifier, title, body, event.kind.value)

    # ── gates ─────────────────────────────────────────────────────────

    def should_notify(self, kind: TransitionKind | None = None) -> bool:
        """Whether a notification may be shown right now.

        *kind* adds the per-event toggle; without it only the global
        gates apply (used for notices that are not transitions).
        """
        s = self._settings
        if not s.notifications_enabled or s.do_not_disturb:
            return False
        if kind is not None and not getattr(s, _TOGGLES[kind], True):
            return False
        if self.in_quiet_hours():
            return False
        if self._permission is not None:
            try:
                return bool(self._permission())
            except Exception:
                logger.exception("Notification permission check failed")
                return False
        return True

    def in_quiet_hours(self, now: datetime | None = None) -> bool:
        s = self._settings
        if not s.quiet_hours_enabled:
            return False
        moment = (now or datetime.fromtimestamp(self._clock())).time()
        try:
            return in_quiet_hours(moment, s.quiet_hours_start, s.quiet_hours_end)
        except ValueError:
            logger.warning(
                "Ignoring malformed quiet hours %r-%r",
                s.quiet_hours_start, s.quiet_hours_end,
            )
            return False

    # ── helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _run(what: str, fn: Callable, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Side effect failed: %s", what)
