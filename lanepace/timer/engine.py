"""Qt coordinators wiring the timer components to a tick scheduler.

``LaneTimerEngine`` drives the lane bank and the interval sequencer;
``StepProgramEngine`` plays a work/rest step program; ``StopwatchEngine``
drives the per-athlete stopwatches.  All three are QObjects: every
command and every tick runs on the thread that owns the engine, so state
is only ever written from one place.  Callers on other threads should
reach the command slots through queued connections.

The renderer never reads the live lane objects.  After each change the
engines publish an immutable, versioned snapshot through
``state_changed``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Hashable, Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from .effects import Effect, Haptic, HapticKind, PlaySignal, SignalKind
from .formatting import format_elapsed, parse_pace
from .lanes import (
    DEFAULT_LANE_COUNT,
    DEFAULT_PRE_WARNING,
    LaneState,
    LaneTimerBank,
    PaceStatus,
    SendOff,
    TimerMode,
    mode_from_name,
)
from .scheduler import Clock, TickScheduler
from .sequencer import IntervalSequencer, SequencerCursor, SequencerStatus
from .steps import DEFAULT_REPEATS, DEFAULT_STEPS, IntervalStep, StepKind, StepProgram
from .stopwatches import ParallelStopwatchBank


logger = logging.getLogger(__name__)

LANE_TICK_MS = 100
STOPWATCH_TICK_MS = 20


# ── published read model ──────────────────────────────────────────────────


@dataclass(frozen=True)
class LaneSnapshot:
    index: int
    name: str
    lane_number: int
    offset: float
    current_time: float
    target_time: float
    state: LaneState
    enabled: bool
    volume: float
    pace_status: PaceStatus

    @property
    def display(self) -> str:
        return format_elapsed(self.current_time)


@dataclass(frozen=True)
class EngineSnapshot:
    version: int
    mode: str
    is_running: bool
    is_paused: bool
    status: SequencerStatus
    cursor: SequencerCursor
    set_count: int
    phase_duration: float | None
    lanes: tuple[LaneSnapshot, ...]


@dataclass(frozen=True)
class WatchSnapshot:
    is_running: bool
    elapsed: float
    lap_index: int


@dataclass(frozen=True)
class StopwatchSnapshot:
    version: int
    watches: Mapping[Hashable, WatchSnapshot]

@dataclass(frozen=True)
class StepProgramSnapshot:
    version: int
    is_running: bool
    is_complete: bool
    repeat_index: int
    repeat_total: int
    step_index: int
    step_count: int
    step_kind: StepKind | None
    step_label: str
    step_elapsed: float
    step_remaining: float
    total_elapsed: float

    @property
    def display(self) -> str:
        return format_elapsed(self.step_remaining)


def _dispatch_effects(engine, effects: list[Effect]) -> None:
    """Emit *effects* on *engine*'s signals, honouring its feedback toggles."""
    for effect in effects:
        if isinstance(effect, PlaySignal):
            if not engine.enable_audio or effect.volume <= 0:
                continue
            engine.signal_requested.emit(effect.kind, effect.lane, effect.volume)
        elif isinstance(effect, Haptic):
            if engine.enable_haptics:
                engine.haptic_requested.emit(effect.kind)


# ══════════════════════════════════════════════════════════════════════════
#  LANE TIMER ENGINE
# ══════════════════════════════════════════════════════════════════════════


class LaneTimerEngine(QObject):
    """Multi-lane coaching timer with an interval series.

    Signals
    -------
    signal_requested(kind: SignalKind, lane: int | None, volume: float)
        Play a start/warning/finish/send-off/series-complete sound.
        Dropped when audio is disabled or the lane is muted.
    haptic_requested(kind: HapticKind)
        Tactile acknowledgement for a command or timer event.
    state_changed(snapshot: EngineSnapshot)
        Emitted after every command and every tick that changed state.
    """

    signal_requested = pyqtSignal(object, object, float)
    haptic_requested = pyqtSignal(object)
    state_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        lane_count: int = DEFAULT_LANE_COUNT,
        mode: TimerMode | None = None,
        pre_warning_time: float = DEFAULT_PRE_WARNING,
        enable_audio: bool = True,
        enable_haptics: bool = True,
        interval_ms: int = LANE_TICK_MS,
        clock: Clock | None = None,
        scheduler: TickScheduler | None = None,
    ) -> None:
        super().__init__(parent)

        # ── components ────────────────────────────────────────────────
        self._bank = LaneTimerBank(
            lane_count, mode=mode, pre_warning_time=pre_warning_time
        )
        self._sequencer = IntervalSequencer()
        if scheduler is None:
            scheduler = TickScheduler(self, interval_ms=interval_ms, clock=clock)
        self._scheduler = scheduler
        self._scheduler.subscribe(self._on_tick)

        # ── configuration ─────────────────────────────────────────────
        self.enable_audio: bool = enable_audio
        self.enable_haptics: bool = enable_haptics

        # ── run state ─────────────────────────────────────────────────
        self._is_running: bool = False
        self._is_paused: bool = False
        self._version: int = 0
        self._snapshot: EngineSnapshot = self._build_snapshot()

    @classmethod
    def from_settings(cls, settings, parent: QObject | None = None, **kwargs):
        return cls(
            parent,
            lane_count=settings.default_lanes,
            mode=mode_from_name(settings.timer_mode),
            pre_warning_time=settings.pre_warning_time,
            enable_audio=settings.enable_audio,
            enable_haptics=settings.enable_haptics,
            interval_ms=settings.tick_interval_ms,
            **kwargs,
        )

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def bank(self) -> LaneTimerBank:
        return self._bank

    @property
    def sequencer(self) -> IntervalSequencer:
        return self._sequencer

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def mode(self) -> TimerMode:
        return self._bank.mode

    def set_mode(self, mode: TimerMode | str) -> None:
        if isinstance(mode, str):
            mode = mode_from_name(mode)
        self._bank.mode = mode
        self._publish()

    @property
    def pre_warning_time(self) -> float:
        return self._bank.pre_warning_time

    @pre_warning_time.setter
    def pre_warning_time(self, seconds: float) -> None:
        self._bank.pre_warning_time = max(0.0, seconds)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        if self._is_running:
            return
        self._is_running = True
        self._is_paused = False
        if not self._sequencer.is_running:
            self._sequencer.start()
        self._apply_pace_targets()
        self._bank.start()
        self._scheduler.acquire(self)
        logger.debug("lanes started in %s mode", self.mode.name)
        self._dispatch([PlaySignal(SignalKind.START), Haptic(HapticKind.MEDIUM)])
        self._publish()

    def pause(self) -> None:
        if not self._is_running or self._is_paused:
            return
        self._is_paused = True
        self._bank.pause()
        self._sequencer.pause()
        self._scheduler.release(self)
        self._dispatch([Haptic(HapticKind.LIGHT)])
        self._publish()

    def resume(self) -> None:
        if not self._is_paused:
            return
        self._is_paused = False
        self._bank.resume()
        self._sequencer.resume()
        self._scheduler.acquire(self)
        self._dispatch([Haptic(HapticKind.LIGHT)])
        self._publish()

    def reset(self) -> None:
        self._is_running = False
        self._is_paused = False
        self._sequencer.reset()
        self._bank.reset()
        self._scheduler.release(self)
        self._dispatch([Haptic(HapticKind.HEAVY)])
        self._publish()

    def add_repetition(self) -> None:
        self._dispatch(self._sequencer.add_repetition())
        self._publish()

    def skip_current_interval(self) -> None:
        before = self._sequencer.cursor
        effects = self._sequencer.skip_current_interval()
        self._after_phase_move(before, effects)
        self._publish()

    def restart_current_repetition(self) -> None:
        effects = self._sequencer.restart_current_repetition()
        self._bank.zero_times()
        self._dispatch(effects)
        self._publish()

    # ── lanes ─────────────────────────────────────────────────────────

    def toggle_lane(self, index: int) -> None:
        if self._bank.toggle_lane(index):
            self._publish()

    def update_lane_offset(self, index: int, seconds: float) -> None:
        if self._bank.set_offset(index, seconds):
            self._publish()

    def set_lane_volume(self, index: int, volume: float) -> None:
        if self._bank.set_volume(index, volume):
            self._publish()

    def set_lane_target(self, index: int, seconds: float) -> None:
        if self._bank.set_target(index, seconds):
            self._publish()

    def add_lane(self) -> None:
        lane = self._bank.add_lane()
        logger.info("added %s", lane.name)
        self._publish()

    def remove_lane(self, index: int) -> None:
        if self._bank.remove_lane(index):
            self._update_demand()
            self._publish()

    # ── series ────────────────────────────────────────────────────────

    def add_simple_interval(
        self,
        repetitions: int,
        work: float,
        rest: float,
        distance: str = "",
        target_pace: str = "",
    ) -> None:
        try:
            self._sequencer.add_simple_interval(
                repetitions, work, rest, distance=distance, target_pace=target_pace
            )
        except ValueError as exc:
            logger.warning("interval rejected: %s", exc)
            return
        # First set added mid-run: the series starts now.
        if self._is_running and not self._sequencer.is_running:
            self._bank.zero_times()
            self._start_sequencer()
        self._publish()

    def create_pyramid_series(self, base: float, steps: int) -> None:
        try:
            self._sequencer.create_pyramid_series(base, steps)
        except ValueError as exc:
            logger.warning("pyramid rejected: %s", exc)
            return
        self._series_rebuilt()

    def create_ladder_series(self, start: float, increment: float, steps: int) -> None:
        try:
            self._sequencer.create_ladder_series(start, increment, steps)
        except ValueError as exc:
            logger.warning("ladder rejected: %s", exc)
            return
        self._series_rebuilt()

    def close(self) -> None:
        """Release the scheduler for good."""
        self._scheduler.release(self)
        self._scheduler.unsubscribe(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: tick
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self, dt: float, now: float) -> None:
        if not self._is_running or self._is_paused:
            return

        phase_target = (
            self._sequencer.phase_duration if self._sequencer.is_running else None
        )
        effects, crossed = self._bank.advance(dt, phase_target)

        # One phase advance per tick, however many lanes crossed.
        if crossed and isinstance(self.mode, SendOff):
            before = self._sequencer.cursor
            effects.extend(self._sequencer.advance_phase())
            self._after_phase_move(before, [])

        if self._is_running and not self._bank.any_running:
            self._stop_idle()

        self._dispatch(effects)
        self._publish()

    def _after_phase_move(self, before: SequencerCursor, effects: list[Effect]) -> None:
        if self._sequencer.cursor != before:
            self._bank.zero_times()
            self._apply_pace_targets()
        if self._sequencer.is_complete and self._is_running:
            self._is_running = False
            self._is_paused = False
            self._bank.finish_all()
            self._scheduler.release(self)
        self._dispatch(effects)

    def _series_rebuilt(self) -> None:
        self._bank.zero_times()
        if self._is_running:
            self._start_sequencer()
        logger.info("series rebuilt: %d sets", len(self._sequencer.sets))
        self._publish()

    def _start_sequencer(self) -> None:
        self._sequencer.start()
        if self._is_paused:
            self._sequencer.pause()
        self._apply_pace_targets()

    def _apply_pace_targets(self) -> None:
        """Load the current set's target pace into every lane, if it has one."""
        current = self._sequencer.current_set
        if current is None or not self._sequencer.is_running:
            return
        pace = parse_pace(current.target_pace)
        if pace <= 0:
            return
        for index in range(len(self._bank)):
            self._bank.set_target(index, pace)

    def _update_demand(self) -> None:
        if not self._is_running or self._is_paused:
            self._scheduler.release(self)
        elif self._bank.any_running:
            self._scheduler.acquire(self)
        else:
            self._stop_idle()

    def _stop_idle(self) -> None:
        self._is_running = False
        self._scheduler.release(self)
        logger.info("no lane running, lanes stopped")

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: effects & publishing
    # ══════════════════════════════════════════════════════════════════

    def _dispatch(self, effects: list[Effect]) -> None:
        _dispatch_effects(self, effects)

    def _build_snapshot(self) -> EngineSnapshot:
        lanes = tuple(
            LaneSnapshot(
                index=i,
                name=lane.name,
                lane_number=lane.lane_number,
                offset=lane.offset,
                current_time=lane.current_time,
                target_time=lane.target_time,
                state=lane.state,
                enabled=lane.enabled,
                volume=lane.volume,
                pace_status=lane.pace_status,
            )
            for i, lane in enumerate(self._bank.lanes)
        )
        return EngineSnapshot(
            version=self._version,
            mode=self.mode.name,
            is_running=self._is_running,
            is_paused=self._is_paused,
            status=self._sequencer.status,
            cursor=self._sequencer.cursor,
            set_count=len(self._sequencer.sets),
            phase_duration=self._sequencer.phase_duration,
            lanes=lanes,
        )

    def _publish(self) -> None:
        self._version += 1
        self._snapshot = self._build_snapshot()
        self.state_changed.emit(self._snapshot)


# ══════════════════════════════════════════════════════════════════════════
#  STEP PROGRAM ENGINE
# ══════════════════════════════════════════════════════════════════════════


class StepProgramEngine(QObject):
    """Single interval clock running a work/rest step program.

    Signals
    -------
    signal_requested(kind: SignalKind, lane: None, volume: float)
        Send-off when a work step begins, finish when a rest step begins,
        warning ahead of a step's end, series-complete after the last repeat.
    haptic_requested(kind: HapticKind)
    state_changed(snapshot: StepProgramSnapshot)
    """

    signal_requested = pyqtSignal(object, object, float)
    haptic_requested = pyqtSignal(object)
    state_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        steps: list[IntervalStep] | tuple[IntervalStep, ...] = DEFAULT_STEPS,
        repeat_total: int = DEFAULT_REPEATS,
        pre_warning_time: float = 0.0,
        enable_audio: bool = True,
        enable_haptics: bool = True,
        interval_ms: int = LANE_TICK_MS,
        clock: Clock | None = None,
        scheduler: TickScheduler | None = None,
    ) -> None:
        super().__init__(parent)
        self._program = StepProgram(
            steps, repeat_total, pre_warning_time=pre_warning_time
        )
        if scheduler is None:
            scheduler = TickScheduler(self, interval_ms=interval_ms, clock=clock)
        self._scheduler = scheduler
        self._scheduler.subscribe(self._on_tick)

        self.enable_audio: bool = enable_audio
        self.enable_haptics: bool = enable_haptics

        self._version: int = 0
        self._snapshot: StepProgramSnapshot = self._build_snapshot()

    @classmethod
    def from_settings(cls, settings, parent: QObject | None = None, **kwargs):
        return cls(
            parent,
            pre_warning_time=settings.pre_warning_time,
            enable_audio=settings.enable_audio,
            enable_haptics=settings.enable_haptics,
            interval_ms=settings.tick_interval_ms,
            **kwargs,
        )

    # ── properties ────────────────────────────────────────────────────

    @property
    def program(self) -> StepProgram:
        return self._program

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def snapshot(self) -> StepProgramSnapshot:
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._program.is_running

    # ── commands ──────────────────────────────────────────────────────

    def start(self) -> None:
        if self._program.is_running:
            return
        self._program.start()
        if not self._program.is_running:
            return
        self._scheduler.acquire(self)
        _dispatch_effects(self, [PlaySignal(SignalKind.START), Haptic(HapticKind.MEDIUM)])
        self._publish()

    def pause(self) -> None:
        if not self._program.is_running:
            return
        self._program.pause()
        self._scheduler.release(self)
        _dispatch_effects(self, [Haptic(HapticKind.LIGHT)])
        self._publish()

    def reset(self) -> None:
        self._program.reset()
        self._scheduler.release(self)
        _dispatch_effects(self, [Haptic(HapticKind.HEAVY)])
        self._publish()

    def next_step(self) -> None:
        effects = self._program.next_step()
        self._after_move([Haptic(HapticKind.MEDIUM)] + effects)

    def previous_step(self) -> None:
        effects = self._program.previous_step()
        self._after_move([Haptic(HapticKind.MEDIUM)] + effects)

    def set_program(self, steps: list[IntervalStep], repeat_total: int) -> None:
        try:
            self._program.set_program(steps, repeat_total)
        except ValueError as exc:
            logger.warning("step program rejected: %s", exc)
            return
        self._scheduler.release(self)
        logger.info("step program: %d steps x %d", len(steps), repeat_total)
        self._publish()

    def close(self) -> None:
        self._scheduler.release(self)
        self._scheduler.unsubscribe(self._on_tick)

    # ── internal ──────────────────────────────────────────────────────

    def _on_tick(self, dt: float, now: float) -> None:
        if not self._program.is_running:
            return
        self._after_move(self._program.advance(dt))

    def _after_move(self, effects: list[Effect]) -> None:
        if not self._program.is_running:
            self._scheduler.release(self)
        _dispatch_effects(self, effects)
        self._publish()

    def _build_snapshot(self) -> StepProgramSnapshot:
        program = self._program
        step = program.current_step
        return StepProgramSnapshot(
            version=self._version,
            is_running=program.is_running,
            is_complete=program.is_complete,
            repeat_index=program.repeat_index,
            repeat_total=program.repeat_total,
            step_index=program.step_index,
            step_count=len(program.steps),
            step_kind=step.kind if step is not None else None,
            step_label=step.label if step is not None else "",
            step_elapsed=program.step_elapsed,
            step_remaining=program.step_remaining,
            total_elapsed=program.total_elapsed,
        )

    def _publish(self) -> None:
        self._version += 1
        self._snapshot = self._build_snapshot()
        self.state_changed.emit(self._snapshot)


# ══════════════════════════════════════════════════════════════════════════
#  STOPWATCH ENGINE
# ══════════════════════════════════════════════════════════════════════════


class StopwatchEngine(QObject):
    """Parallel per-athlete stopwatches with lap splits.

    Signals
    -------
    split_recorded(entity_id, lap_index: int, elapsed_ms: int)
        A split was taken; the record store persists it.
    state_changed(snapshot: StopwatchSnapshot)
    """

    split_recorded = pyqtSignal(object, int, int)
    state_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = STOPWATCH_TICK_MS,
        clock: Clock | None = None,
        scheduler: TickScheduler | None = None,
    ) -> None:
        super().__init__(parent)
        self._bank = ParallelStopwatchBank()
        if scheduler is None:
            scheduler = TickScheduler(self, interval_ms=interval_ms, clock=clock)
        self._scheduler = scheduler
        self._scheduler.subscribe(self._on_tick)
        self._version: int = 0
        self._snapshot = StopwatchSnapshot(0, MappingProxyType({}))

    @classmethod
    def from_settings(cls, settings, parent: QObject | None = None, **kwargs):
        return cls(parent, interval_ms=settings.stopwatch_interval_ms, **kwargs)

    @property
    def bank(self) -> ParallelStopwatchBank:
        return self._bank

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def snapshot(self) -> StopwatchSnapshot:
        return self._snapshot

    def elapsed(self, entity_id: Hashable) -> float:
        return self._bank.elapsed(entity_id)

    def lap_index(self, entity_id: Hashable) -> int:
        return self._bank.lap_index(entity_id)

    def is_running(self, entity_id: Hashable) -> bool:
        sw = self._bank.watches.get(entity_id)
        return sw is not None and sw.is_running

    def display(self, entity_id: Hashable) -> str:
        return format_elapsed(self._bank.elapsed(entity_id))

    # ── commands ──────────────────────────────────────────────────────

    def toggle(self, entity_id: Hashable) -> None:
        running = self._bank.toggle(entity_id, self._scheduler.now())
        logger.debug("stopwatch %r %s", entity_id, "started" if running else "stopped")
        self._update_demand()
        self._publish()

    def reset(self, entity_id: Hashable) -> None:
        self._bank.reset(entity_id)
        self._update_demand()
        self._publish()

    def remove(self, entity_id: Hashable) -> None:
        self._bank.remove(entity_id)
        self._update_demand()
        self._publish()

    def add_split(self, entity_id: Hashable) -> int:
        """Take a split now and return its lap number."""
        self._bank.tick(self._scheduler.now())
        lap = self._bank.add_split(entity_id)
        elapsed_ms = int(round(self._bank.elapsed(entity_id) * 1000))
        self.split_recorded.emit(entity_id, lap, elapsed_ms)
        self._publish()
        return lap

    def close(self) -> None:
        self._scheduler.release(self)
        self._scheduler.unsubscribe(self._on_tick)

    # ── internal ──────────────────────────────────────────────────────

    def _on_tick(self, dt: float, now: float) -> None:
        if not self._bank.any_running:
            return
        self._bank.tick(now)
        self._publish()

    def _update_demand(self) -> None:
        if self._bank.any_running:
            self._scheduler.acquire(self)
        else:
            self._scheduler.release(self)

    def _publish(self) -> None:
        self._version += 1
        watches = {
            key: WatchSnapshot(sw.is_running, sw.elapsed, sw.lap_index)
            for key, sw in self._bank.watches.items()
        }
        self._snapshot = StopwatchSnapshot(self._version, MappingProxyType(watches))
        self.state_changed.emit(self._snapshot)
