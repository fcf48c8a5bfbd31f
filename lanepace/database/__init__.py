"""Database package."""

from .db import get_session, init_db
from .models import Athlete, TrainingSession, Split
from .recorder import SplitRecorder

__all__ = ["get_session", "init_db", "Athlete", "TrainingSession", "Split", "SplitRecorder"]
