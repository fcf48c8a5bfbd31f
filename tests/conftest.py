"""Shared pytest fixtures for LanePace tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from lanepace.database.db import configure_engine, init_db
from lanepace.timer.engine import LaneTimerEngine, StopwatchEngine
from lanepace.timer.scheduler import TickScheduler

from helpers import FakeClock


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
def scheduler(qapp, clock):
    return TickScheduler(parent=None, interval_ms=100, clock=clock)


@pytest.fixture
def engine(qapp, clock):
    """Single-lane send-off engine driven by a fake clock."""
    return LaneTimerEngine(parent=None, lane_count=1, clock=clock)


@pytest.fixture
def engine_4(qapp, clock):
    """Four lanes, send-off mode."""
    return LaneTimerEngine(parent=None, lane_count=4, clock=clock)


@pytest.fixture
def stopwatches(qapp, clock):
    return StopwatchEngine(parent=None, clock=clock)
