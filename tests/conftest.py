"""Shared pytest fixtures for FocusFlow tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from focusflow.database.db import configure_engine, init_db  # noqa: E402
from focusflow.timer.engine import TimerEngine  # noqa: E402
from focusflow.timer.presets import Preset  # noqa: E402
from focusflow.timer.store import TimerStateStore  # noqa: E402

from helpers import FakeClock  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return TimerStateStore(tmp_path / "timer_state.json")


@pytest.fixture
def engine(qapp, clock, store):
    """Pomodoro engine (25/5 x4), breaks auto-start, work waits."""
    return TimerEngine(None, store=store, clock=clock)


@pytest.fixture
def engine_auto(qapp, clock, store):
    """Engine that auto-starts both breaks and focus phases."""
    return TimerEngine(
        None, store=store, clock=clock,
        auto_start_breaks=True, auto_start_work=True,
    )


@pytest.fixture
def engine_manual(qapp, clock, store):
    """Engine that stops after every phase."""
    return TimerEngine(
        None, store=store, clock=clock,
        auto_start_breaks=False, auto_start_work=False,
    )


@pytest.fixture
def short_preset():
    """Two 1-minute cycles, handy for loop tests."""
    return Preset("Short", 1, 1, 2)
