"""Free-running stopwatches, one per athlete (or any hashable id).

Each stopwatch keeps its own last-sample instant, so entities started at
different moments never share a delta.  Times come from the caller's
monotonic clock; the bank never reads a clock itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable


@dataclass
class Stopwatch:
    is_running: bool = False
    elapsed: float = 0.0
    last_sample: float | None = None
    lap_index: int = 0


class ParallelStopwatchBank:
    def __init__(self) -> None:
        self._watches: dict[Hashable, Stopwatch] = {}

    @property
    def any_running(self) -> bool:
        return any(sw.is_running for sw in self._watches.values())

    @property
    def watches(self) -> dict[Hashable, Stopwatch]:
        return self._watches

    def ensure(self, entity_id: Hashable) -> Stopwatch:
        sw = self._watches.get(entity_id)
        if sw is None:
            sw = self._watches[entity_id] = Stopwatch()
        return sw

    def toggle(self, entity_id: Hashable, now: float) -> bool:
        """Start or stop *entity_id*.  Returns the new running flag."""
        sw = self.ensure(entity_id)
        if sw.is_running:
            if sw.last_sample is not None:
                sw.elapsed += max(0.0, now - sw.last_sample)
            sw.is_running = False
            sw.last_sample = None
        else:
            sw.is_running = True
            sw.last_sample = now
        return sw.is_running

    def tick(self, now: float) -> None:
        for sw in self._watches.values():
            if not sw.is_running:
                continue
            last = sw.last_sample if sw.last_sample is not None else now
            sw.elapsed += max(0.0, now - last)
            sw.last_sample = now

    def add_split(self, entity_id: Hashable) -> int:
        sw = self.ensure(entity_id)
        sw.lap_index += 1
        return sw.lap_index

    def reset(self, entity_id: Hashable) -> None:
        self._watches[entity_id] = Stopwatch()

    def remove(self, entity_id: Hashable) -> None:
        self._watches.pop(entity_id, None)

    def elapsed(self, entity_id: Hashable) -> float:
        sw = self._watches.get(entity_id)
        return sw.elapsed if sw is not None else 0.0

    def lap_index(self, entity_id: Hashable) -> int:
        sw = self._watches.get(entity_id)
        return sw.lap_index if sw is not None else 0
