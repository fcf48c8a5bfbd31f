"""SQLAlchemy ORM models for LanePace."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Text
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class Athlete(Base):
    """A swimmer (or runner) that can own a stopwatch and splits."""

    __tablename__ = "athletes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    bib_number = Column(String(20), nullable=True)
    lane_number = Column(Integer, nullable=True)
    heat_number = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)

    splits = relationship("Split", back_populates="athlete")

    def __repr__(self) -> str:
        return f"<Athlete id={self.id} name={self.name!r} lane={self.lane_number}>"


class TrainingSession(Base):
    """A practice or competition that splits are recorded against."""

    __tablename__ = "training_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    title = Column(String(255), nullable=False, default="")
    is_competition = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    splits = relationship(
        "Split",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Split.id",
    )

    def __repr__(self) -> str:
        return f"<TrainingSession id={self.id} title={self.title!r}>"


class Split(Base):
    """One lap split: lap number and elapsed milliseconds at the split."""

    __tablename__ = "splits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id"), nullable=True)
    session_id = Column(Integer, ForeignKey("training_sessions.id"), nullable=True)
    lap_index = Column(Integer, nullable=False)
    elapsed_ms = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    athlete = relationship("Athlete", back_populates="splits")
    session = relationship("TrainingSession", back_populates="splits")

    def __repr__(self) -> str:
        return (
            f"<Split athlete={self.athlete_id} lap={self.lap_index} "
            f"ms={self.elapsed_ms}>"
        )
