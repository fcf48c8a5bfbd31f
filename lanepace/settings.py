"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/LanePace/settings.json

Usage::

    settings = load_settings()
    settings.pre_warning_time = 15.0
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "LanePace"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timing ────────────────────────────────────────────────────────
    tick_interval_ms: int = 100
    stopwatch_interval_ms: int = 20
    pre_warning_time: float = 10.0         # seconds before phase end
    default_lanes: int = 8
    timer_mode: str = "send_off"           # send_off | countdown | count_up | rest_based

    # ── feedback ──────────────────────────────────────────────────────
    enable_audio: bool = True
    enable_haptics: bool = True
    sound_volume: int = 70                 # 0-100

    # ── display ───────────────────────────────────────────────────────
    use_24_hour_format: bool = True


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("ignoring unreadable settings at %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
