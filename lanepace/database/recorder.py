"""Persist stopwatch splits as they are taken."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject

from .db import get_session
from .models import Athlete, Split, TrainingSession


logger = logging.getLogger(__name__)


class SplitRecorder(QObject):
    """Stores every ``split_recorded`` event against the open session.

    Stopwatch entity ids are athlete primary keys.  Splits for ids with no
    matching athlete are still stored, without the athlete link.

    Usage::

        recorder = SplitRecorder(parent=self)
        recorder.open_session("Tuesday main set")
        stopwatches.split_recorded.connect(recorder.record)
    """

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._session_id: int | None = None

    @property
    def session_id(self) -> int | None:
        return self._session_id

    def open_session(self, title: str = "", *, is_competition: bool = False) -> int:
        with get_session() as db:
            record = TrainingSession(title=title, is_competition=is_competition)
            db.add(record)
            db.flush()
            self._session_id = record.id
        logger.info("opened training session %d (%r)", self._session_id, title)
        return self._session_id

    def close_session(self) -> None:
        self._session_id = None

    def record(self, entity_id, lap_index: int, elapsed_ms: int) -> int:
        """Slot for ``StopwatchEngine.split_recorded``.  Returns the split id."""
        with get_session() as db:
            athlete_id = None
            if isinstance(entity_id, int) and db.get(Athlete, entity_id) is not None:
                athlete_id = entity_id
            split = Split(
                athlete_id=athlete_id,
                session_id=self._session_id,
                lap_index=lap_index,
                elapsed_ms=elapsed_ms,
            )
            db.add(split)
            db.flush()
            split_id = split.id
        logger.debug("split %d: entity=%r lap=%d %d ms", split_id, entity_id, lap_index, elapsed_ms)
        return split_id
