"""Display helpers for elapsed times and pace strings."""

from __future__ import annotations

from datetime import datetime


def format_elapsed(seconds: float, show_hundredths: bool = True) -> str:
    """``83.456`` → ``"1:23.45"``; ``3723.5`` → ``"1:02:03.50"``."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hundredths = (total_ms % 1000) // 10
    total_seconds = total_ms // 1000
    s = total_seconds % 60
    m = (total_seconds // 60) % 60
    h = total_seconds // 3600

    if h > 0:
        text = f"{h}:{m:02d}:{s:02d}"
    else:
        text = f"{m}:{s:02d}"
    if show_hundredths:
        text += f".{hundredths:02d}"
    return text


def parse_pace(pace: str) -> float:
    """``"1:05"`` → ``65.0``.  Anything else → ``0.0``."""
    parts = pace.strip().split(":")
    if len(parts) != 2:
        return 0.0
    try:
        minutes = float(parts[0])
        seconds = float(parts[1])
    except ValueError:
        return 0.0
    return minutes * 60 + seconds


def format_clock_time(when: datetime, use_24_hour: bool = True) -> str:
    """Wall-clock time of day: ``"14:05:09"``, or ``"2:05:09 PM"``."""
    if use_24_hour:
        return when.strftime("%H:%M:%S")
    hour = when.hour % 12 or 12
    suffix = "AM" if when.hour < 12 else "PM"
    return f"{hour}:{when.minute:02d}:{when.second:02d} {suffix}"
