"""Signal sounds: numpy synthesis, cached WAV files, QSoundEffect playback.

Every timer signal has its own sound, generated programmatically with
sine waves and ADSR envelopes.  Files are cached to disk so later
launches skip synthesis.

Sound names
-----------
- ``start``: rising three-note chime
- ``warning``: double beep at the pre-warning mark
- ``finish``: long low tone when a countdown lane hits zero
- ``send_off``: sharp starter beep, one per released lane
- ``series_complete``: bright four-note arpeggio
"""

from __future__ import annotations

import io
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.effects import SignalKind


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "LanePace"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = tuple(kind.value for kind in SignalKind)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


def _notes(freqs: list[float], note_dur: float, gap: float, level: float) -> list[np.ndarray]:
    parts: list[np.ndarray] = []
    for freq in freqs:
        tone = _sine(freq, note_dur) * level
        env = _make_envelope(len(tone), attack=80, decay=200, sustain_level=0.4, release=300)
        parts.append(tone * env)
        parts.append(_silence(gap))
    return parts


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_start() -> bytes:
    """Start: rising C5→E5→G5."""
    parts = _notes([523.25, 659.25, 783.99], note_dur=0.12, gap=0.03, level=0.6)
    parts.append(_silence(0.05))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_warning() -> bytes:
    """Warning: two 880 Hz beeps, 100 ms apart."""
    beep = _sine(880.0, 0.08) * 0.5
    beep = beep * _make_envelope(len(beep), attack=40, decay=100, sustain_level=0.6, release=300)
    return _to_wav_bytes(np.concatenate([beep, _silence(0.1), beep, _silence(0.05)]))


def _generate_finish() -> bytes:
    """Finish: long A4 with an octave overtone and slow release."""
    duration = 0.9
    combined = _sine(440.0, duration) * 0.45 + _sine(880.0, duration) * 0.08
    env = _make_envelope(
        len(combined),
        attack=int(SAMPLE_RATE * 0.01),
        decay=int(SAMPLE_RATE * 0.2),
        sustain_level=0.5,
        release=int(SAMPLE_RATE * 0.5),
    )
    return _to_wav_bytes(combined * env)


def _generate_send_off() -> bytes:
    """Send-off: short, hard 1 kHz starter beep."""
    beep = _sine(1000.0, 0.25) * 0.7
    env = _make_envelope(len(beep), attack=20, decay=200, sustain_level=0.9, release=600)
    return _to_wav_bytes(np.concatenate([beep * env, _silence(0.03)]))


def _generate_series_complete() -> bytes:
    """Series complete: C5→E5→G5→C6, last note held."""
    parts = _notes([523.25, 659.25, 783.99], note_dur=0.10, gap=0.02, level=0.5)
    last = _sine(1046.50, 0.4) * 0.5
    parts.append(last * _make_envelope(len(last), attack=80, decay=300, sustain_level=0.5, release=800))
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS: dict[str, callable] = {
    SignalKind.START.value: _generate_start,
    SignalKind.WARNING.value: _generate_warning,
    SignalKind.FINISH.value: _generate_finish,
    SignalKind.SEND_OFF.value: _generate_send_off,
    SignalKind.SERIES_COMPLETE.value: _generate_series_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNAL PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class SignalPlayer(QObject):
    """Plays timer signals at a per-signal volume.

    Usage::

        player = SignalPlayer(parent=self)
        player.set_volume(70)
        engine.signal_requested.connect(player.play_signal)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # master, 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set master volume (0-100)."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play_signal(self, kind: SignalKind, lane: int | None = None, volume: float = 1.0) -> None:
        """Slot for ``LaneTimerEngine.signal_requested``."""
        self.play(kind.value, volume)

    def play(self, name: str, volume: float = 1.0) -> None:
        """Play a sound by name, scaled by *volume* (0.0–1.0)."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            return
        effect.setVolume(self.effective_volume(volume))
        effect.play()

    def effective_volume(self, volume: float) -> float:
        return self._volume * max(0.0, min(volume, 1.0))

    @property
    def volume(self) -> int:
        """Master volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
