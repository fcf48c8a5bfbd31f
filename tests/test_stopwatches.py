"""Tests for the parallel stopwatch bank and its Qt engine."""

from dataclasses import FrozenInstanceError

import pytest

from lanepace.settings import Settings
from lanepace.timer.engine import StopwatchEngine
from lanepace.timer.stopwatches import ParallelStopwatchBank

from helpers import SignalCollector, tick


# ═══════════════════════════════════════════════════════════════════════════
#  BANK
# ═══════════════════════════════════════════════════════════════════════════


class TestBank:

    def test_toggle_tick_toggle(self):
        bank = ParallelStopwatchBank()
        bank.toggle("ana", now=0.0)
        bank.tick(now=2.5)
        bank.toggle("ana", now=2.5)
        bank.tick(now=12.5)  # stopped: no accrual
        assert bank.elapsed("ana") == 2.5

        bank.toggle("ana", now=12.5)
        bank.tick(now=13.5)
        assert bank.elapsed("ana") == 3.5

    def test_stop_captures_time_since_last_tick(self):
        bank = ParallelStopwatchBank()
        bank.toggle("ana", now=0.0)
        bank.tick(now=1.0)
        bank.toggle("ana", now=1.75)
        assert bank.elapsed("ana") == 1.75
        assert bank.watches["ana"].last_sample is None

    def test_entities_use_their_own_deltas(self):
        bank = ParallelStopwatchBank()
        bank.toggle("ana", now=0.0)
        bank.tick(now=4.0)
        bank.toggle("ben", now=4.0)
        bank.tick(now=5.0)
        assert bank.elapsed("ana") == 5.0
        assert bank.elapsed("ben") == 1.0

    def test_any_running(self):
        bank = ParallelStopwatchBank()
        assert bank.any_running is False
        bank.toggle(1, now=0.0)
        assert bank.any_running is True
        bank.toggle(1, now=1.0)
        assert bank.any_running is False

    def test_split_counts_up(self):
        bank = ParallelStopwatchBank()
        assert bank.add_split("ana") == 1
        assert bank.add_split("ana") == 2
        assert bank.lap_index("ana") == 2
        assert bank.lap_index("ben") == 0

    def test_reset(self):
        bank = ParallelStopwatchBank()
        bank.toggle("ana", now=0.0)
        bank.tick(now=3.0)
        bank.add_split("ana")
        bank.reset("ana")
        assert bank.elapsed("ana") == 0.0
        assert bank.lap_index("ana") == 0
        assert bank.any_running is False

    def test_unknown_entity_reads_zero(self):
        bank = ParallelStopwatchBank()
        assert bank.elapsed("ghost") == 0.0

    def test_remove(self):
        bank = ParallelStopwatchBank()
        bank.ensure("ana")
        bank.remove("ana")
        bank.remove("ana")
        assert "ana" not in bank.watches


# ═══════════════════════════════════════════════════════════════════════════
#  ENGINE
# ═══════════════════════════════════════════════════════════════════════════


class TestStopwatchEngine:

    def test_toggle_acquires_scheduler(self, stopwatches):
        assert stopwatches.scheduler.is_active is False
        stopwatches.toggle("ana")
        assert stopwatches.scheduler.is_active is True
        assert stopwatches.is_running("ana") is True

    def test_scheduler_stops_when_none_running(self, stopwatches):
        stopwatches.toggle("ana")
        stopwatches.toggle("ben")
        stopwatches.toggle("ana")
        assert stopwatches.scheduler.is_active is True
        stopwatches.toggle("ben")
        assert stopwatches.scheduler.is_active is False

    def test_ticks_accumulate(self, stopwatches, clock):
        stopwatches.toggle("ana")
        tick(stopwatches, clock, 0.25, times=8)
        assert stopwatches.elapsed("ana") == pytest.approx(2.0)
        assert stopwatches.display("ana") == "0:02.00"

    def test_paused_time_not_counted(self, stopwatches, clock):
        stopwatches.toggle("ana")
        tick(stopwatches, clock, 0.5, times=5)
        stopwatches.toggle("ana")
        clock.advance(60.0)
        stopwatches.toggle("ana")
        tick(stopwatches, clock, 0.5, times=2)
        assert stopwatches.elapsed("ana") == pytest.approx(3.5)

    def test_split_emits_lap_and_millis(self, stopwatches, clock):
        c = SignalCollector()
        stopwatches.split_recorded.connect(c)

        stopwatches.toggle(7)
        tick(stopwatches, clock, 0.5, times=3)
        clock.advance(0.25)  # between ticks: the split still sees it

        lap = stopwatches.add_split(7)
        assert lap == 1
        assert c.last == (7, 1, 1750)

    def test_reset_releases_scheduler(self, stopwatches):
        stopwatches.toggle("ana")
        stopwatches.reset("ana")
        assert stopwatches.scheduler.is_active is False
        assert stopwatches.elapsed("ana") == 0.0

    def test_state_changed_snapshot(self, stopwatches, clock):
        c = SignalCollector()
        stopwatches.state_changed.connect(c)
        stopwatches.toggle("ana")
        tick(stopwatches, clock, 1.0)

        snap = c.last
        assert snap.version == 3
        assert snap.watches["ana"].elapsed == pytest.approx(1.0)

    def test_snapshot_is_a_copy(self, stopwatches, clock):
        stopwatches.toggle("ana")
        snap = stopwatches.snapshot
        tick(stopwatches, clock, 1.0)
        assert snap.watches["ana"].elapsed == 0.0

    def test_snapshot_is_read_only(self, stopwatches):
        stopwatches.toggle("ana")
        snap = stopwatches.snapshot
        with pytest.raises(TypeError):
            snap.watches["ben"] = None
        with pytest.raises(FrozenInstanceError):
            snap.watches["ana"].elapsed = 5.0
        assert snap.watches["ana"].is_running is True

    def test_from_settings(self, qapp, clock):
        sw = StopwatchEngine.from_settings(Settings(stopwatch_interval_ms=50), clock=clock)
        assert sw.scheduler.interval_ms == 50

    def test_close_releases(self, stopwatches):
        stopwatches.toggle("ana")
        stopwatches.close()
        assert stopwatches.scheduler.is_active is False
