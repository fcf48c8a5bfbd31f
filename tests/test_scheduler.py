"""Tests for the demand-driven tick scheduler."""

import pytest

from lanepace.timer.scheduler import TickScheduler

from helpers import SignalCollector, tick


class TestDemand:

    def test_idle_until_acquired(self, scheduler):
        assert scheduler.is_active is False

    def test_acquire_starts(self, scheduler):
        scheduler.acquire("lanes")
        assert scheduler.is_active is True

    def test_release_last_owner_stops(self, scheduler):
        scheduler.acquire("lanes")
        scheduler.release("lanes")
        assert scheduler.is_active is False

    def test_stays_active_while_any_owner_remains(self, scheduler):
        scheduler.acquire("lanes")
        scheduler.acquire("stopwatches")
        scheduler.release("lanes")
        assert scheduler.is_active is True
        scheduler.release("stopwatches")
        assert scheduler.is_active is False

    def test_release_unknown_owner_is_harmless(self, scheduler):
        scheduler.release("nobody")
        assert scheduler.is_active is False

    def test_interval(self, qapp, clock):
        s = TickScheduler(parent=None, interval_ms=20, clock=clock)
        assert s.interval_ms == 20


class TestDeltas:

    def test_delta_is_measured_not_nominal(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.acquire("x")

        tick(scheduler, clock, 0.25)
        tick(scheduler, clock, 0.75)

        assert [dt for dt, _ in c.items] == [0.0, 0.25, 0.75]

    def test_callback_receives_clock_reading(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.acquire("x")
        tick(scheduler, clock, 0.5)
        assert c.last[1] == clock.now

    def test_first_tick_after_start_has_zero_delta(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        clock.advance(50.0)
        scheduler.acquire("x")
        assert scheduler.awaiting_first_tick is True

        clock.advance(0.1)
        scheduler._on_timeout()
        assert c.items == [(0.0, clock.now)]
        assert scheduler.awaiting_first_tick is False

        tick(scheduler, clock, 0.25)
        assert c.last[0] == pytest.approx(0.25)

    def test_stopped_time_is_not_delivered(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.acquire("x")
        tick(scheduler, clock, 1.0)
        scheduler.release("x")
        assert scheduler.awaiting_first_tick is False

        clock.advance(30.0)
        scheduler.acquire("x")
        tick(scheduler, clock, 0.5)

        assert [dt for dt, _ in c.items] == [0.0, 1.0, 0.0, 0.5]

    def test_no_ticks_while_inactive(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        tick(scheduler, clock, 1.0)
        assert len(c) == 0

    def test_backwards_clock_clamps_to_zero(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.acquire("x")
        scheduler._on_timeout()
        clock.advance(-2.0)
        scheduler._on_timeout()
        assert c.last[0] == 0.0

    def test_deltas_sum_to_wall_time(self, scheduler, clock):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.acquire("x")
        for dt in (0.5, 0.125, 0.25, 1.0, 0.125):
            tick(scheduler, clock, dt)
        assert sum(dt for dt, _ in c.items) == pytest.approx(2.0)


class TestSerialDelivery:

    def test_reentrant_tick_is_dropped(self, scheduler, clock):
        calls: list[float] = []

        def nested(dt, now):
            calls.append(dt)
            scheduler._on_timeout()  # must not recurse

        scheduler.subscribe(nested)
        scheduler.acquire("x")
        tick(scheduler, clock, 0.5)
        assert calls == [0.0, 0.5]

    def test_subscribers_run_in_order(self, scheduler):
        order: list[str] = []
        scheduler.subscribe(lambda dt, now: order.append("a"))
        scheduler.subscribe(lambda dt, now: order.append("b"))
        scheduler.acquire("x")
        scheduler._on_timeout()
        assert order == ["a", "b"]

    def test_subscribe_is_idempotent(self, scheduler):
        c = SignalCollector()
        scheduler.subscribe(c)
        scheduler.subscribe(c)
        scheduler.acquire("x")
        scheduler._on_timeout()
        assert len(c) == 1

    def test_release_during_tick_stops_after_tick(self, scheduler, clock):
        seen: list[float] = []

        def once(dt, now):
            seen.append(dt)
            scheduler.release("x")

        scheduler.subscribe(once)
        scheduler.acquire("x")
        scheduler._on_timeout()
        tick(scheduler, clock, 0.5)
        assert seen == [0.0]
        assert scheduler.is_active is False
