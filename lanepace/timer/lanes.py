"""Per-lane timers and the bank that advances them.

Lane states
-----------
STOPPED    Not started, or reset.
RUNNING    Advancing every tick.
WARNING    Still advancing; the pre-warning for the current phase fired.
PAUSED     Frozen until resume.
FINISHED   Countdown hit zero, or the series completed.

Timer modes are small frozen dataclasses rather than string tags so each
one only carries what it needs (``Countdown`` knows its default duration).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .effects import Effect, Haptic, HapticKind, PlaySignal, SignalKind


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class LaneState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    WARNING = "warning"
    FINISHED = "finished"


class PaceStatus(Enum):
    AHEAD = "ahead"
    ON_PACE = "on_pace"
    BEHIND = "behind"
    NEUTRAL = "neutral"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_LANE_COUNT = 8
DEFAULT_PRE_WARNING = 10.0
PACE_TOLERANCE = 2.0

# Absorbs float residue from summing many small deltas.
_EPSILON = 1e-6

_ADVANCING = (LaneState.RUNNING, LaneState.WARNING)


# ── timer modes ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CountUp:
    name = "count_up"


@dataclass(frozen=True)
class Countdown:
    """Counts down from the lane target, or *duration* if the lane has none."""

    duration: float = 60.0
    name = "countdown"


@dataclass(frozen=True)
class SendOff:
    name = "send_off"


@dataclass(frozen=True)
class RestBased:
    name = "rest_based"


TimerMode = CountUp | Countdown | SendOff | RestBased

MODES_BY_NAME: dict[str, type] = {
    "count_up": CountUp,
    "countdown": Countdown,
    "send_off": SendOff,
    "rest_based": RestBased,
}


def mode_from_name(name: str) -> TimerMode:
    """``"send_off"`` → ``SendOff()``.  Raises ``ValueError`` if unknown."""
    try:
        return MODES_BY_NAME[name]()
    except KeyError:
        raise ValueError(f"unknown timer mode: {name!r}") from None


# ── lane ──────────────────────────────────────────────────────────────────


@dataclass
class LaneTimer:
    name: str
    lane_number: int
    offset: float = 0.0
    current_time: float = 0.0
    target_time: float = 0.0
    state: LaneState = LaneState.STOPPED
    enabled: bool = True
    volume: float = 1.0
    warning_fired: bool = field(default=False, repr=False)

    @property
    def pace_status(self) -> PaceStatus:
        if self.target_time <= 0:
            return PaceStatus.NEUTRAL
        diff = self.current_time - self.target_time
        if abs(diff) <= PACE_TOLERANCE:
            return PaceStatus.ON_PACE
        return PaceStatus.BEHIND if diff > 0 else PaceStatus.AHEAD

    @property
    def biased_time(self) -> float:
        """``current_time`` shifted by the lane offset, never negative."""
        return max(0.0, self.current_time + self.offset)


# ── bank ──────────────────────────────────────────────────────────────────


class LaneTimerBank:
    """An ordered set of independent lane timers.

    The bank never plays sounds itself: mutating methods return a list of
    :mod:`effects <lanepace.timer.effects>` for the caller to dispatch.
    Invalid lane indices are ignored.
    """

    def __init__(
        self,
        lane_count: int = DEFAULT_LANE_COUNT,
        *,
        mode: TimerMode | None = None,
        pre_warning_time: float = DEFAULT_PRE_WARNING,
    ) -> None:
        self.mode: TimerMode = mode if mode is not None else SendOff()
        self.pre_warning_time: float = pre_warning_time
        self._lanes: list[LaneTimer] = []
        for _ in range(max(0, lane_count)):
            self.add_lane()

    # ── access ────────────────────────────────────────────────────────

    @property
    def lanes(self) -> list[LaneTimer]:
        return self._lanes

    def __len__(self) -> int:
        return len(self._lanes)

    def lane(self, index: int) -> LaneTimer | None:
        if 0 <= index < len(self._lanes):
            return self._lanes[index]
        return None

    @property
    def any_running(self) -> bool:
        return any(lane.state in _ADVANCING for lane in self._lanes)

    # ── lane management ───────────────────────────────────────────────

    def add_lane(self) -> LaneTimer:
        number = max((lane.lane_number for lane in self._lanes), default=0) + 1
        lane = LaneTimer(name=f"Lane {number}", lane_number=number)
        self._lanes.append(lane)
        return lane

    def remove_lane(self, index: int) -> bool:
        if self.lane(index) is None:
            logger.warning("remove_lane: no lane at index %d", index)
            return False
        del self._lanes[index]
        return True

    def toggle_lane(self, index: int) -> bool:
        lane = self.lane(index)
        if lane is None:
            logger.warning("toggle_lane: no lane at index %d", index)
            return False
        lane.enabled = not lane.enabled
        return True

    def set_offset(self, index: int, seconds: float) -> bool:
        lane = self.lane(index)
        if lane is None:
            logger.warning("set_offset: no lane at index %d", index)
            return False
        lane.offset = float(seconds)
        return True

    def set_volume(self, index: int, volume: float) -> bool:
        lane = self.lane(index)
        if lane is None:
            return False
        lane.volume = max(0.0, min(1.0, float(volume)))
        return True

    def set_target(self, index: int, seconds: float) -> bool:
        lane = self.lane(index)
        if lane is None:
            return False
        lane.target_time = max(0.0, float(seconds))
        return True

    # ── controls ──────────────────────────────────────────────────────

    def start(self) -> None:
        """Put every enabled lane into RUNNING.

        Countdown lanes that have nothing on the clock are loaded with
        their target (or the mode's default duration) first.
        """
        for lane in self._lanes:
            if not lane.enabled:
                continue
            if isinstance(self.mode, Countdown) and lane.current_time <= 0:
                lane.current_time = lane.target_time or self.mode.duration
                lane.warning_fired = False
            lane.state = LaneState.RUNNING

    def pause(self) -> None:
        for lane in self._lanes:
            if lane.state in _ADVANCING:
                lane.state = LaneState.PAUSED

    def resume(self) -> None:
        for lane in self._lanes:
            if lane.state == LaneState.PAUSED:
                lane.state = LaneState.RUNNING

    def reset(self) -> None:
        for lane in self._lanes:
            lane.current_time = 0.0
            lane.state = LaneState.STOPPED
            lane.warning_fired = False

    def zero_times(self) -> None:
        """Restart the measurement for a new phase.

        Lanes that were warning go back to RUNNING so the next phase can
        warn again.
        """
        for lane in self._lanes:
            lane.current_time = 0.0
            lane.warning_fired = False
            if lane.state == LaneState.WARNING:
                lane.state = LaneState.RUNNING

    def finish_all(self) -> None:
        for lane in self._lanes:
            if lane.state in _ADVANCING or lane.state == LaneState.PAUSED:
                lane.state = LaneState.FINISHED

    # ── tick ──────────────────────────────────────────────────────────

    def advance(
        self, dt: float, phase_target: float | None = None
    ) -> tuple[list[Effect], bool]:
        """Advance every enabled, running lane by *dt* seconds.

        *phase_target* is the active work/rest duration from the sequencer,
        or ``None`` when no series is active.  Returns the effects to
        dispatch and whether any send-off lane crossed its phase boundary.
        """
        effects: list[Effect] = []
        crossed = False
        warned = False
        dt = max(0.0, dt)

        for index, lane in enumerate(self._lanes):
            if not lane.enabled or lane.state not in _ADVANCING:
                continue

            before = self._remaining(lane, phase_target)
            if isinstance(self.mode, (CountUp, RestBased)):
                lane.current_time += dt
            elif isinstance(self.mode, Countdown):
                lane.current_time = max(0.0, lane.current_time - dt)
                if lane.current_time < _EPSILON:
                    lane.current_time = 0.0
            elif isinstance(self.mode, SendOff):
                lane.current_time += dt
            else:
                raise TypeError(f"unsupported timer mode: {self.mode!r}")
            after = self._remaining(lane, phase_target)

            if self._check_warning(lane, before, after):
                effects.append(self._lane_signal(SignalKind.WARNING, index))
                warned = True

            if isinstance(self.mode, Countdown) and lane.current_time <= 0:
                lane.state = LaneState.FINISHED
                effects.append(self._lane_signal(SignalKind.FINISH, index))
            elif (
                isinstance(self.mode, SendOff)
                and phase_target is not None
                and lane.biased_time >= phase_target - _EPSILON
            ):
                effects.append(self._lane_signal(SignalKind.SEND_OFF, index))
                crossed = True

        # One buzz per tick, however many lanes warned together.
        if warned:
            effects.append(Haptic(HapticKind.WARNING))
        return effects, crossed

    # ── internal ──────────────────────────────────────────────────────

    def _remaining(self, lane: LaneTimer, phase_target: float | None) -> float | None:
        if isinstance(self.mode, Countdown):
            return lane.current_time
        if phase_target is not None:
            return phase_target - lane.biased_time
        if lane.target_time > 0:
            return lane.target_time - lane.biased_time
        return None

    def _check_warning(
        self, lane: LaneTimer, before: float | None, after: float | None
    ) -> bool:
        # Edge triggered: fires on the tick that carries the remaining time
        # from above the threshold to at-or-below it, however large dt is.
        if lane.warning_fired or before is None or after is None:
            return False
        if not (before > self.pre_warning_time >= after):
            return False
        lane.warning_fired = True
        lane.state = LaneState.WARNING
        return True

    def _lane_signal(self, kind: SignalKind, index: int) -> PlaySignal:
        return PlaySignal(kind, lane=index, volume=self._lanes[index].volume)
