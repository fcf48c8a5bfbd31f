"""Step-program interval timer.

A program is an ordered list of work and rest steps played
``repeat_total`` times over.  Time that overshoots a step boundary is
carried into the following step, so a late tick never shortens the
program.

Controls
--------
start            Run from the current position (rewinds a finished program).
pause            Freeze, position preserved.
reset            Back to the first step of the first repeat.
next_step        Jump to the following step now.
previous_step    Restart the step, or go back one if it only just began.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .effects import Effect, Haptic, HapticKind, PlaySignal, SignalKind


logger = logging.getLogger(__name__)


class StepKind(Enum):
    WORK = "work"
    REST = "rest"


@dataclass(frozen=True)
class IntervalStep:
    kind: StepKind
    duration: float
    label: str = ""

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError("step duration must be positive")


DEFAULT_STEPS = (
    IntervalStep(StepKind.WORK, 30.0, "Work"),
    IntervalStep(StepKind.REST, 10.0, "Rest"),
)
DEFAULT_REPEATS = 8

BOUNDARY_TOLERANCE = 0.0005
REWIND_GRACE = 0.5      # seconds into a step before "previous" restarts it


class StepProgram:
    """Plays a step program and reports boundary effects."""

    def __init__(
        self,
        steps: list[IntervalStep] | tuple[IntervalStep, ...] = DEFAULT_STEPS,
        repeat_total: int = DEFAULT_REPEATS,
        *,
        pre_warning_time: float = 0.0,
    ) -> None:
        self.pre_warning_time: float = pre_warning_time
        self._steps: tuple[IntervalStep, ...] = ()
        self._repeat_total: int = 1
        self.set_program(steps, repeat_total)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def steps(self) -> tuple[IntervalStep, ...]:
        return self._steps

    @property
    def repeat_total(self) -> int:
        return self._repeat_total

    @property
    def repeat_index(self) -> int:
        return self._repeat_index

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def step_elapsed(self) -> float:
        return self._step_elapsed

    @property
    def total_elapsed(self) -> float:
        return self._total_elapsed

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def current_step(self) -> IntervalStep | None:
        if self._step_index < len(self._steps):
            return self._steps[self._step_index]
        return None

    @property
    def step_remaining(self) -> float:
        step = self.current_step
        if step is None or self._complete:
            return 0.0
        return max(0.0, step.duration - self._step_elapsed)

    # ══════════════════════════════════════════════════════════════════
    #  PROGRAM
    # ══════════════════════════════════════════════════════════════════

    def set_program(
        self,
        steps: list[IntervalStep] | tuple[IntervalStep, ...],
        repeat_total: int,
    ) -> None:
        """Replace the program and rewind.  Raises ``ValueError`` if invalid."""
        if repeat_total < 1:
            raise ValueError("repeat_total must be at least 1")
        self._steps = tuple(steps)
        self._repeat_total = int(repeat_total)
        self._running = False
        self.reset()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> list[Effect]:
        if not self._steps:
            logger.debug("start ignored: empty step program")
            return []
        if self._complete:
            self.reset()
        self._running = True
        return []

    def pause(self) -> list[Effect]:
        self._running = False
        return []

    def reset(self) -> list[Effect]:
        self._running = False
        self._complete = False
        self._repeat_index = 0
        self._step_index = 0
        self._step_elapsed = 0.0
        self._total_elapsed = 0.0
        return []

    def next_step(self) -> list[Effect]:
        if not self._steps or self._complete:
            return []
        return self._advance_step()

    def previous_step(self) -> list[Effect]:
        if not self._steps or self._complete:
            return []
        if self._step_elapsed > REWIND_GRACE:
            self._step_elapsed = 0.0
        elif self._step_index > 0:
            self._step_index -= 1
            self._step_elapsed = 0.0
        elif self._repeat_index > 0:
            self._repeat_index -= 1
            self._step_index = len(self._steps) - 1
            self._step_elapsed = 0.0
        return []

    # ══════════════════════════════════════════════════════════════════
    #  TICK
    # ══════════════════════════════════════════════════════════════════

    def advance(self, dt: float) -> list[Effect]:
        """Add *dt* seconds and cross as many step boundaries as it covers."""
        if not self._running or not self._steps:
            return []
        dt = max(0.0, dt)
        self._total_elapsed += dt

        step = self._steps[self._step_index]
        before = step.duration - self._step_elapsed
        self._step_elapsed += dt
        effects = self._check_warning(before, step.duration - self._step_elapsed)

        while self._running:
            step = self._steps[self._step_index]
            if self._step_elapsed < step.duration - BOUNDARY_TOLERANCE:
                break
            overflow = max(0.0, self._step_elapsed - step.duration)
            effects.extend(self._advance_step())
            if self._running:
                self._step_elapsed = overflow
        return effects

    # ── internal ──────────────────────────────────────────────────────

    def _advance_step(self) -> list[Effect]:
        self._step_elapsed = 0.0
        if self._step_index + 1 < len(self._steps):
            self._step_index += 1
        elif self._repeat_index + 1 < self._repeat_total:
            self._repeat_index += 1
            self._step_index = 0
        else:
            self._running = False
            self._complete = True
            logger.info(
                "step program complete (%d x %d steps)",
                self._repeat_total, len(self._steps),
            )
            return [PlaySignal(SignalKind.SERIES_COMPLETE), Haptic(HapticKind.SUCCESS)]

        if self._steps[self._step_index].kind is StepKind.WORK:
            return [PlaySignal(SignalKind.SEND_OFF)]
        return [PlaySignal(SignalKind.FINISH)]

    def _check_warning(self, before: float, after: float) -> list[Effect]:
        if self.pre_warning_time <= 0:
            return []
        if before > self.pre_warning_time >= after:
            return [PlaySignal(SignalKind.WARNING), Haptic(HapticKind.WARNING)]
        return []
