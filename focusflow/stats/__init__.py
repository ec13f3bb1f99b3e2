"""Session statistics."""

from .recorder import StatsRecorder, StatsSummary, PERIODS, period_start

__all__ = ["StatsRecorder", "StatsSummary", "PERIODS", "period_start"]
