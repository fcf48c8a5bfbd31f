"""Tests for settings persistence and signal sound synthesis/playback.

Covers:
- Settings dataclass defaults and JSON round-trip
- WAV generation for every signal kind
- SignalPlayer volume handling and engine wiring
"""

from __future__ import annotations

import io
import json
import wave

import pytest

from lanepace.settings import Settings, load_settings, save_settings
from lanepace.audio.sounds import (
    SignalPlayer,
    SOUND_NAMES,
    _generate_start,
    _generate_warning,
    _generate_finish,
    _generate_send_off,
    _generate_series_complete,
)
from lanepace.timer.effects import SignalKind


GENERATORS = [
    _generate_start,
    _generate_warning,
    _generate_finish,
    _generate_send_off,
    _generate_series_complete,
]


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsDefaults:
    def test_timing_defaults(self):
        s = Settings()
        assert s.tick_interval_ms == 100
        assert s.stopwatch_interval_ms == 20
        assert s.pre_warning_time == 10.0

    def test_lane_defaults(self):
        s = Settings()
        assert s.default_lanes == 8
        assert s.timer_mode == "send_off"

    def test_feedback_defaults(self):
        s = Settings()
        assert s.enable_audio is True
        assert s.enable_haptics is True
        assert s.sound_volume == 70


class TestSettingsPersistence:
    def test_round_trip(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        monkeypatch.setattr("lanepace.settings.SETTINGS_PATH", path)
        monkeypatch.setattr("lanepace.settings.APP_SUPPORT_DIR", tmp_path)
        save_settings(Settings(pre_warning_time=15.0, timer_mode="countdown"))
        loaded = load_settings()
        assert loaded.pre_warning_time == 15.0
        assert loaded.timer_mode == "countdown"

    def test_missing_file_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "lanepace.settings.SETTINGS_PATH", tmp_path / "nonexistent.json",
        )
        assert load_settings().default_lanes == 8

    def test_invalid_json_returns_defaults(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        path.write_text("NOT VALID JSON", encoding="utf-8")
        monkeypatch.setattr("lanepace.settings.SETTINGS_PATH", path)
        assert load_settings().tick_interval_ms == 100

    def test_non_object_json_returns_defaults(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        monkeypatch.setattr("lanepace.settings.SETTINGS_PATH", path)
        assert load_settings() == Settings()

    def test_extra_keys_ignored(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        data = {"default_lanes": 6, "unknown_future_key": True}
        path.write_text(json.dumps(data), encoding="utf-8")
        monkeypatch.setattr("lanepace.settings.SETTINGS_PATH", path)
        s = load_settings()
        assert s.default_lanes == 6
        assert not hasattr(s, "unknown_future_key")


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:

    def test_one_sound_per_signal(self):
        assert set(SOUND_NAMES) == {kind.value for kind in SignalKind}

    @pytest.mark.parametrize("gen_fn", GENERATORS)
    def test_generator_produces_wav(self, gen_fn):
        data = gen_fn()
        assert isinstance(data, bytes)
        assert len(data) > 100
        assert data[:4] == b"RIFF"

    @pytest.mark.parametrize("gen_fn", GENERATORS)
    def test_wav_is_parseable(self, gen_fn):
        with wave.open(io.BytesIO(gen_fn()), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0


@pytest.mark.usefixtures("qapp")
class TestSignalPlayer:
    def test_wav_files_generated(self, tmp_path):
        SignalPlayer(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists(), f"Missing WAV: {name}"

    def test_all_sounds_loaded(self, tmp_path):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            assert name in player._effects

    def test_set_volume_clamps(self, tmp_path):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        player.set_volume(200)
        assert player.volume == 100
        player.set_volume(-10)
        assert player.volume == 0

    def test_lane_volume_scales_master(self, tmp_path):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        player.set_volume(50)
        assert player.effective_volume(0.5) == pytest.approx(0.25)
        assert player.effective_volume(2.0) == pytest.approx(0.5)

    def test_play_applies_volume(self, tmp_path):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        player.set_volume(80)
        player.play_signal(SignalKind.SEND_OFF, 2, 0.5)
        assert player._effects["send_off"].volume() == pytest.approx(0.4, abs=0.01)

    def test_play_unknown_or_disabled_is_noop(self, tmp_path):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        player.play("nonexistent_sound")
        player.set_enabled(False)
        assert player.enabled is False
        player.play("start")

    def test_connects_to_engine(self, tmp_path, engine):
        player = SignalPlayer(parent=None, sounds_dir=tmp_path)
        engine.signal_requested.connect(player.play_signal)
        engine.start()  # should not raise
