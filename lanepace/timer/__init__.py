"""Timer package."""

from .effects import SignalKind, HapticKind, PlaySignal, Haptic
from .scheduler import TickScheduler
from .lanes import (
    LaneTimer,
    LaneTimerBank,
    LaneState,
    PaceStatus,
    CountUp,
    Countdown,
    SendOff,
    RestBased,
    mode_from_name,
)
from .sequencer import (
    IntervalSequencer,
    IntervalSet,
    SequencerCursor,
    SequencerStatus,
    simple_set,
    pyramid_sets,
    ladder_sets,
)
from .steps import IntervalStep, StepKind, StepProgram
from .stopwatches import ParallelStopwatchBank, Stopwatch
from .engine import (
    LaneTimerEngine,
    StepProgramEngine,
    StopwatchEngine,
    EngineSnapshot,
    LaneSnapshot,
    StepProgramSnapshot,
    StopwatchSnapshot,
    WatchSnapshot,
)
from .formatting import format_clock_time, format_elapsed, parse_pace

__all__ = [
    "SignalKind",
    "HapticKind",
    "PlaySignal",
    "Haptic",
    "TickScheduler",
    "LaneTimer",
    "LaneTimerBank",
    "LaneState",
    "PaceStatus",
    "CountUp",
    "Countdown",
    "SendOff",
    "RestBased",
    "mode_from_name",
    "IntervalSequencer",
    "IntervalSet",
    "SequencerCursor",
    "SequencerStatus",
    "simple_set",
    "pyramid_sets",
    "ladder_sets",
    "IntervalStep",
    "StepKind",
    "StepProgram",
    "ParallelStopwatchBank",
    "Stopwatch",
    "LaneTimerEngine",
    "StepProgramEngine",
    "StopwatchEngine",
    "EngineSnapshot",
    "LaneSnapshot",
    "StepProgramSnapshot",
    "StopwatchSnapshot",
    "WatchSnapshot",
    "format_clock_time",
    "format_elapsed",
    "parse_pace",
]
