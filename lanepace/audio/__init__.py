"""Audio package."""

from .sounds import SignalPlayer, SOUND_NAMES

__all__ = ["SignalPlayer", "SOUND_NAMES"]
