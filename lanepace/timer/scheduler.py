"""Demand-driven tick scheduler.

A single ``QTimer`` fires at a nominal period, but subscribers never see
that period.  Each tick carries the real time elapsed since the previous
tick, measured with a monotonic clock, so scheduling jitter does not
accumulate into the timers.  The first tick after a start fires at once
and carries a zero delta; it only sets the baseline.

The timer only runs while someone holds demand on it::

    scheduler = TickScheduler(interval_ms=100)
    scheduler.subscribe(bank_engine._on_tick)
    scheduler.acquire(bank_engine)   # starts the QTimer
    ...
    scheduler.release(bank_engine)   # last owner gone → QTimer stops
"""

from __future__ import annotations

import logging
from typing import Callable, Hashable

from PyQt6.QtCore import QElapsedTimer, QObject, QTimer


logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 100

TickCallback = Callable[[float, float], None]
Clock = Callable[[], float]


class TickScheduler(QObject):
    """Serial, drift-free tick source.

    Parameters
    ----------
    interval_ms
        Nominal period between ticks.
    clock
        Monotonic clock returning seconds.  Defaults to a ``QElapsedTimer``
        started with the scheduler; tests pass a fake.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(parent)

        if clock is None:
            self._elapsed = QElapsedTimer()
            self._elapsed.start()
            clock = self._read_elapsed
        self._clock: Clock = clock

        self._subscribers: list[TickCallback] = []
        self._owners: set[Hashable] = set()
        self._active: bool = False
        self._last: float | None = None
        self._in_tick: bool = False

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(max(1, interval_ms))
        self._qt_timer.timeout.connect(self._on_timeout)

        # Zero-delta baseline tick, fired as soon as the event loop runs.
        self._first_tick = QTimer(self)
        self._first_tick.setSingleShot(True)
        self._first_tick.setInterval(0)
        self._first_tick.timeout.connect(self._on_timeout)

    # ── properties ────────────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def awaiting_first_tick(self) -> bool:
        """Started, but the zero-delta baseline tick has not run yet."""
        return self._active and self._last is None

    @property
    def interval_ms(self) -> int:
        return self._qt_timer.interval()

    def now(self) -> float:
        """Current reading of the scheduler's monotonic clock (seconds)."""
        return self._clock()

    # ── subscription ──────────────────────────────────────────────────

    def subscribe(self, callback: TickCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: TickCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # ── demand ────────────────────────────────────────────────────────

    def acquire(self, owner: Hashable) -> None:
        """Register demand from *owner*; starts ticking if idle."""
        self._owners.add(owner)
        if not self.is_active:
            self.start()

    def release(self, owner: Hashable) -> None:
        """Drop demand from *owner*; stops once nobody needs ticks."""
        self._owners.discard(owner)
        if not self._owners and self.is_active:
            self.stop()

    # ── start / stop ──────────────────────────────────────────────────

    def start(self) -> None:
        if self.is_active:
            return
        self._active = True
        self._last = None
        self._first_tick.start()
        self._qt_timer.start()
        logger.debug("tick scheduler started (%d ms)", self.interval_ms)

    def stop(self) -> None:
        if not self.is_active:
            return
        self._first_tick.stop()
        self._qt_timer.stop()
        self._active = False
        self._last = None
        logger.debug("tick scheduler stopped")

    # ── internal ──────────────────────────────────────────────────────

    def _read_elapsed(self) -> float:
        return self._elapsed.nsecsElapsed() / 1e9

    def _on_timeout(self) -> None:
        if not self._active or self._in_tick:
            return
        now = self._clock()
        dt = 0.0 if self._last is None else max(0.0, now - self._last)
        self._last = now

        self._in_tick = True
        try:
            # Copy: a subscriber may release demand or unsubscribe mid-tick.
            for callback in list(self._subscribers):
                callback(dt, now)
        finally:
            self._in_tick = False
