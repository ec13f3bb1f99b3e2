"""Stats recorder: the sink for completed phases and the queries the
stats view needs.

Periods
-------
``today``  since local midnight
``week``   since the most recent Sunday
``month``  since the 1st of the month
``year``   since January 1st
``all``    everything

The engine never depends on any of this; it only hands over
:class:`~focusflow.timer.state.SessionRecord` objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy import func

from ..database.db import get_session
from ..database.models import SessionLog
from ..timer.state import Mode, SessionRecord

logger = logging.getLogger(__name__)

PERIODS = ("today", "week", "month", "year", "all")


@dataclass
class StatsSummary:
    period: str
    total_sessions: int = 0
    focus_sessions: int = 0
    focus_minutes: int = 0
    break_minutes: int = 0
    average_focus_minutes: int = 0


def period_start(period: str, today: date) -> date | None:
    """First day included in *period*, or ``None`` for ``all``."""
    if period == "today":
        return today
    if period == "week":
        # date.weekday(): Monday=0 … Sunday=6
        return today - timedelta(days=(today.weekday() + 1) % 7)
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    if period == "all":
        return None
    raise ValueError(f"unknown stats period: {period!r}")


class StatsRecorder:
    """Stores :class:`SessionRecord` rows and aggregates them.

    Usage::

        recorder = StatsRecorder()
        recorder.record(record)
        recorder.summary("week").focus_minutes
    """

    def record(self, record: SessionRecord) -> None:
        with get_session() as db:
            db.add(SessionLog(
                phase=record.phase.value,
                duration_minutes=record.duration_minutes,
                completed_at=record.completed_at,
            ))
        logger.info(
            "Recorded %s session (%d min)",
            record.phase.value, record.duration_minutes,
        )

    def summary(self, period: str = "all", today: date | None = None) -> StatsSummary:
        start = period_start(period, today or date.today())
        result = StatsSummary(period=period)

        with get_session() as db:
            query = db.query(
                SessionLog.phase,
                func.count(SessionLog.id),
                func.coalesce(func.sum(SessionLog.duration_minutes), 0),
            )
            if start is not None:
                query = query.filter(
                    SessionLog.completed_at >= datetime.combine(start, datetime.min.time())
                )
            for phase, count, minutes in query.group_by(SessionLog.phase):
                result.total_sessions += count
                if phase == Mode.FOCUS.value:
                    result.focus_sessions = count
                    result.focus_minutes = int(minutes)
                else:
                    result.break_minutes = int(minutes)

        if result.focus_sessions:
            result.average_focus_minutes = round(
                result.focus_minutes / result.focus_sessions
            )
        return result

    def weekly_breakdown(self, today: date | None = None) -> list[dict]:
        """Focus/break minutes for each of the last 7 days, oldest first."""
        today = today or date.today()
        first = today - timedelta(days=6)
        days = {
            first + timedelta(days=i): {"focus": 0, "break": 0}
            for i in range(7)
        }

        with get_session() as db:
            rows = (
                db.query(SessionLog)
                .filter(SessionLog.completed_at >= datetime.combine(first, datetime.min.time()))
                .all()
            )
            for row in rows:
                bucket = days.get(row.completed_at.date())
                if bucket is not None:
                    bucket[row.phase] = bucket.get(row.phase, 0) + row.duration_minutes

        return [
            {
                "date": day,
                "day": day.strftime("%a"),
                "focus": totals["focus"],
                "break": totals["break"],
            }
            for day, totals in days.items()
        ]

    def streak(self, today: date | None = None) -> int:
        """Consecutive days, ending today, with at least one session."""
        today = today or date.today()
        with get_session() as db:
            stamps = db.query(SessionLog.completed_at).all()
        active = {stamp.date() for (stamp,) in stamps}

        streak = 0
        day = today
        while day in active:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def clear(self) -> None:
        """Delete every recorded session ("reset all data")."""
        with get_session() as db:
            db.query(SessionLog).delete()
