"""Side effects requested by timer state transitions.

The pure timer components (lane bank, sequencer) never talk to audio or
haptics directly.  Every mutating call returns a list of effects, and the
Qt coordinators in :mod:`lanepace.timer.engine` turn them into signals.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SignalKind(Enum):
    START = "start"
    WARNING = "warning"
    FINISH = "finish"
    SEND_OFF = "send_off"
    SERIES_COMPLETE = "series_complete"


class HapticKind(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    WARNING = "warning"
    SUCCESS = "success"


@dataclass(frozen=True)
class PlaySignal:
    """Ask the playback collaborator for a sound.

    ``lane`` is ``None`` for global signals, which play at full volume.
    """

    kind: SignalKind
    lane: int | None = None
    volume: float = 1.0


@dataclass(frozen=True)
class Haptic:
    kind: HapticKind


Effect = PlaySignal | Haptic
