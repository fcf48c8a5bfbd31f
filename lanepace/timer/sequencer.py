"""Interval-series state machine.

States
------
IDLE           Series built (or empty) but not started.
RUNNING_WORK   Work phase of the current repetition.
RUNNING_REST   Rest phase of the current repetition.
PAUSED         Frozen, cursor preserved.
COMPLETE       Cursor moved past the last set.

Transitions
-----------
IDLE → RUNNING_WORK                        (start, needs at least one set)
RUNNING_WORK → RUNNING_REST                (advance_phase / skip)
RUNNING_REST → RUNNING_WORK | COMPLETE     (advance_phase / skip)
RUNNING_* ⇄ PAUSED                         (pause / resume)
Any → IDLE                                 (reset / series rebuilt)

Series builders (``simple_set``, ``pyramid_sets``, ``ladder_sets``) are
pure functions; the sequencer only stores what they return.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .effects import Effect, Haptic, HapticKind, PlaySignal, SignalKind


logger = logging.getLogger(__name__)


class SequencerStatus(Enum):
    IDLE = "idle"
    RUNNING_WORK = "running_work"
    RUNNING_REST = "running_rest"
    PAUSED = "paused"
    COMPLETE = "complete"


PYRAMID_REST_RATIO = 0.5
LADDER_REST_RATIO = 0.3


@dataclass(frozen=True)
class IntervalSet:
    repetitions: int
    work_time: float
    rest_time: float
    distance: str = ""
    target_pace: str = ""

    def __post_init__(self) -> None:
        if self.repetitions < 1:
            raise ValueError("repetitions must be at least 1")
        if self.work_time <= 0:
            raise ValueError("work_time must be positive")
        if self.rest_time < 0:
            raise ValueError("rest_time must not be negative")


@dataclass(frozen=True)
class SequencerCursor:
    set_index: int = 0
    repetition: int = 0
    in_work_phase: bool = True


# ── series builders ───────────────────────────────────────────────────────


def simple_set(
    repetitions: int,
    work: float,
    rest: float,
    distance: str = "",
    target_pace: str = "",
) -> IntervalSet:
    return IntervalSet(repetitions, work, rest, distance, target_pace)


def pyramid_sets(base: float, steps: int) -> list[IntervalSet]:
    """Up to ``base * steps`` and back down, one repetition each.

    ``pyramid_sets(30, 3)`` → work times 30, 60, 90, 60, 30.
    """
    if steps < 1:
        raise ValueError("steps must be at least 1")
    multipliers = list(range(1, steps + 1)) + list(range(steps - 1, 0, -1))
    return [
        IntervalSet(1, base * i, base * i * PYRAMID_REST_RATIO)
        for i in multipliers
    ]


def ladder_sets(start: float, increment: float, steps: int) -> list[IntervalSet]:
    """``steps`` single-repetition sets growing by *increment*."""
    if steps < 1:
        raise ValueError("steps must be at least 1")
    sets = []
    for i in range(steps):
        work = start + increment * i
        sets.append(IntervalSet(1, work, work * LADDER_REST_RATIO))
    return sets


# ── sequencer ─────────────────────────────────────────────────────────────


class IntervalSequencer:
    """Walks repetitions, phases and sets of an interval series.

    Every mutating method returns the effects it wants dispatched.  Lane
    times are not the sequencer's business: the coordinator zeroes them
    whenever :attr:`cursor` changes phase.
    """

    def __init__(self, sets: list[IntervalSet] | None = None) -> None:
        self._sets: list[IntervalSet] = list(sets or [])
        self._set_index: int = 0
        self._repetition: int = 0
        self._in_work_phase: bool = True
        self._running: bool = False
        self._paused: bool = False
        self._complete: bool = False

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def sets(self) -> tuple[IntervalSet, ...]:
        return tuple(self._sets)

    @property
    def cursor(self) -> SequencerCursor:
        return SequencerCursor(self._set_index, self._repetition, self._in_work_phase)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def status(self) -> SequencerStatus:
        if self._complete:
            return SequencerStatus.COMPLETE
        if not self._running:
            return SequencerStatus.IDLE
        if self._paused:
            return SequencerStatus.PAUSED
        if self._in_work_phase:
            return SequencerStatus.RUNNING_WORK
        return SequencerStatus.RUNNING_REST

    @property
    def current_set(self) -> IntervalSet | None:
        if self._set_index < len(self._sets):
            return self._sets[self._set_index]
        return None

    @property
    def phase_duration(self) -> float | None:
        """Length of the active work or rest phase, if any."""
        current = self.current_set
        if current is None:
            return None
        return current.work_time if self._in_work_phase else current.rest_time

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> list[Effect]:
        if not self._sets:
            logger.debug("start ignored: no interval sets")
            return []
        self._set_index = 0
        self._repetition = 0
        self._in_work_phase = True
        self._running = True
        self._paused = False
        self._complete = False
        return []

    def pause(self) -> list[Effect]:
        if self._running:
            self._paused = True
        return []

    def resume(self) -> list[Effect]:
        self._paused = False
        return []

    def reset(self) -> list[Effect]:
        self._set_index = 0
        self._repetition = 0
        self._in_work_phase = True
        self._running = False
        self._paused = False
        self._complete = False
        return []

    def advance_phase(self) -> list[Effect]:
        """Work → rest, or rest → next repetition."""
        if self._complete or self.current_set is None:
            return []
        if self._in_work_phase:
            self._in_work_phase = False
            return []
        return self.advance_repetition()

    def advance_repetition(self) -> list[Effect]:
        if self._complete or self.current_set is None:
            return []

        self._repetition += 1
        self._in_work_phase = True
        if self._repetition >= self._sets[self._set_index].repetitions:
            self._set_index += 1
            self._repetition = 0

        if self._set_index >= len(self._sets):
            self._complete = True
            self._running = False
            self._paused = False
            logger.info("interval series complete (%d sets)", len(self._sets))
            return [PlaySignal(SignalKind.SERIES_COMPLETE), Haptic(HapticKind.SUCCESS)]
        return []

    def skip_current_interval(self) -> list[Effect]:
        if self.current_set is None or self._complete:
            return [Haptic(HapticKind.MEDIUM)]
        if self._in_work_phase:
            self._in_work_phase = False
            effects: list[Effect] = []
        else:
            effects = self.advance_repetition()
        return [Haptic(HapticKind.MEDIUM)] + effects

    def restart_current_repetition(self) -> list[Effect]:
        if not self._complete:
            self._in_work_phase = True
        return [Haptic(HapticKind.MEDIUM)]

    def add_repetition(self) -> list[Effect]:
        """Nudge the repetition counter up to, but never past, the set's count.

        Reaching the count is allowed: the next :meth:`advance_repetition`
        then rolls straight into the following set.
        """
        current = self.current_set
        if self._complete or current is None:
            return []
        if self._repetition + 1 > current.repetitions:
            return []
        self._repetition += 1
        return [Haptic(HapticKind.LIGHT)]

    # ══════════════════════════════════════════════════════════════════
    #  SERIES CONSTRUCTION
    # ══════════════════════════════════════════════════════════════════

    def add_simple_interval(
        self,
        repetitions: int,
        work: float,
        rest: float,
        *,
        distance: str = "",
        target_pace: str = "",
    ) -> None:
        self._sets.append(simple_set(repetitions, work, rest, distance, target_pace))

    def create_pyramid_series(self, base: float, steps: int) -> None:
        self.replace_sets(pyramid_sets(base, steps))

    def create_ladder_series(self, start: float, increment: float, steps: int) -> None:
        self.replace_sets(ladder_sets(start, increment, steps))

    def replace_sets(self, sets: list[IntervalSet]) -> None:
        self._sets = list(sets)
        self.reset()
