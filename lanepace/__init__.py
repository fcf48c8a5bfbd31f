"""LanePace: multi-lane interval timer for swim and track coaching."""

__version__ = "0.1.0"
