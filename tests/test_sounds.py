"""Tests for cue synthesis and the SoundManager.

Covers:
- each generator yields a valid 16-bit mono WAV
- WAV files are cached once in the sounds directory
- volume clamping and the enabled flag
"""

from __future__ import annotations

import io
import wave

import pytest

from focusflow.audio.sounds import (
    SAMPLE_RATE,
    SOUND_NAMES,
    SoundManager,
    _GENERATORS,
    _generate_cycle_complete,
    _generate_focus_start,
)


# ═══════════════════════════════════════════════════════════════════════
#  WAV GENERATION
# ═══════════════════════════════════════════════════════════════════════


class TestWavGeneration:
    def test_every_cue_has_a_generator(self):
        assert set(_GENERATORS) == set(SOUND_NAMES)

    @pytest.mark.parametrize("name", SOUND_NAMES)
    def test_valid_wav(self, name):
        data = _GENERATORS[name]()
        with wave.open(io.BytesIO(data)) as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == SAMPLE_RATE
            assert wf.getnframes() > 0

    def test_blip_is_short(self):
        with wave.open(io.BytesIO(_generate_focus_start())) as wf:
            assert wf.getnframes() / wf.getframerate() == pytest.approx(0.3, abs=0.01)

    def test_arpeggio_is_longest(self):
        with wave.open(io.BytesIO(_generate_cycle_complete())) as wf:
            arpeggio = wf.getnframes()
        with wave.open(io.BytesIO(_generate_focus_start())) as wf:
            blip = wf.getnframes()
        assert arpeggio > blip

    def test_samples_not_silent(self):
        with wave.open(io.BytesIO(_generate_focus_start())) as wf:
            frames = wf.readframes(wf.getnframes())
        assert any(frames)


# ═══════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════


class TestSoundManager:
    def test_create(self, qapp, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert mgr.enabled is True
        assert mgr.volume == 70

    def test_wav_files_generated(self, qapp, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists()
            assert path.stat().st_size > 44  # more than a bare header

    def test_existing_files_are_kept(self, qapp, tmp_path):
        cached = tmp_path / "focus_end.wav"
        cached.write_bytes(_generate_focus_start())
        SoundManager(parent=None, sounds_dir=tmp_path)
        assert cached.read_bytes() == _generate_focus_start()

    def test_set_volume(self, qapp, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_volume(40)
        assert mgr.volume == 40

    def test_set_volume_clamps(self, qapp, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_volume(150)
        assert mgr.volume == 100
        mgr.set_volume(-10)
        assert mgr.volume == 0

    def test_set_enabled(self, qapp, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_enabled(False)
        assert mgr.enabled is False
        mgr.play("focus_end")  # silently skipped

    def test_play_unknown_name_is_noop(self, qapp, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.play("fanfare")

    def test_unwritable_dir_is_logged(self, qapp, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with caplog.at_level("ERROR"):
            mgr = SoundManager(parent=None, sounds_dir=blocker / "sounds")
        assert "Could not write sound cache" in caplog.text
        mgr.play("focus_end")
