"""Tests for voice feature extraction."""

import numpy as np
import pytest

from conftest import SAMPLE_RATE
from shadowing_grader.config import VoiceConfig
from shadowing_grader.features import (
    VoiceFeatureExtractor,
    count_syllables,
    detect_pauses,
    extract_features,
    pitch_jitter,
)
from shadowing_grader.types import AudioBuffer, PitchContour

FRAME_SEC = 512 / SAMPLE_RATE


class TestDetectPauses:
    """Tests for silence-run pause detection."""

    def test_long_silence_is_pause(self) -> None:
        """Ten quiet windows (320 ms) count as one pause."""
        rms = np.array([0.2] * 5 + [0.001] * 10 + [0.2] * 5)
        pauses = detect_pauses(rms, FRAME_SEC)

        assert len(pauses) == 1
        assert pauses[0].start_sec == pytest.approx(5 * FRAME_SEC)
        assert pauses[0].duration_sec == pytest.approx(10 * FRAME_SEC)

    def test_short_silence_is_ignored(self) -> None:
        """Quiet run under 200 ms is not a pause."""
        rms = np.array([0.2] * 5 + [0.001] * 3 + [0.2] * 5)
        assert detect_pauses(rms, FRAME_SEC) == []

    def test_trailing_silence_is_pause(self) -> None:
        """A quiet run at the end of the utterance still counts."""
        rms = np.array([0.2] * 5 + [0.0] * 10)
        pauses = detect_pauses(rms, FRAME_SEC)
        assert len(pauses) == 1

    def test_threshold_is_strict(self) -> None:
        """RMS exactly at the threshold is not silent."""
        rms = np.full(20, 0.01)
        assert detect_pauses(rms, FRAME_SEC, silence_threshold=0.01) == []


class TestCountSyllables:
    """Tests for energy-onset syllable counting."""

    def test_counts_upward_crossings(self) -> None:
        rms = np.array([0.0, 0.5, 0.5, 0.0, 0.0, 0.5, 0.0, 0.5])
        assert count_syllables(rms) == 3

    def test_onset_at_start_counts(self) -> None:
        """Energy in the first window is an onset."""
        rms = np.array([0.5, 0.5, 0.0, 0.0])
        assert count_syllables(rms) == 1

    def test_silence_has_no_syllables(self) -> None:
        assert count_syllables(np.zeros(10)) == 0
        assert count_syllables(np.zeros(0)) == 0


class TestPitchJitter:
    """Tests for the shakiness proxy."""

    def test_steady_pitch_has_no_jitter(self) -> None:
        assert pitch_jitter(np.full(10, 200.0)) == 0.0

    def test_mean_absolute_delta(self) -> None:
        assert pitch_jitter(np.array([200.0, 210.0, 200.0, 210.0])) == pytest.approx(10.0)

    def test_too_short(self) -> None:
        assert pitch_jitter(np.array([200.0])) == 0.0


class TestExtractFeatures:
    """Tests for utterance-level feature extraction."""

    def test_empty_buffer_gives_silent_features(self) -> None:
        features = extract_features(AudioBuffer(samples=np.zeros(0), sample_rate=SAMPLE_RATE))

        assert features.volume == 0.0
        assert features.average_pitch == 0.0
        assert features.speech_rate_syllables_per_sec == 0.0
        assert features.pause_frequency_per_sec == 0.0
        assert features.volume_contour == ()

    def test_bursts_with_gap(self, burst_buffer: AudioBuffer) -> None:
        """Two tone bursts give two syllables and one pause."""
        features = extract_features(burst_buffer)

        assert features.syllable_count == 2
        assert len(features.pauses) == 1
        assert features.pause_frequency_per_sec == pytest.approx(1 / burst_buffer.duration_sec)
        assert 0 < features.speaking_time_sec < burst_buffer.duration_sec
        assert features.speech_rate_syllables_per_sec == pytest.approx(2 / features.speaking_time_sec)

    def test_pitch_statistics(self, burst_buffer: AudioBuffer) -> None:
        """Pitch statistics come from voiced frames only."""
        features = extract_features(burst_buffer)

        assert features.average_pitch == pytest.approx(200.0, rel=0.02)
        assert features.pitch_variance < 25.0
        assert features.voice_shakiness < 5.0

    def test_volume_is_normalized(self, flat_tone_buffer: AudioBuffer) -> None:
        """Loud tone saturates at 1, quiet tone scales with the reference."""
        assert extract_features(flat_tone_buffer).volume == 1.0

        quiet = AudioBuffer(samples=flat_tone_buffer.samples * 0.05, sample_rate=SAMPLE_RATE)
        # 0.5 * 0.05 amplitude sine: RMS ~0.0177, reference 0.1
        assert extract_features(quiet).volume == pytest.approx(0.177, abs=0.01)

    def test_volume_contour_matches_pitch_frames(self, flat_tone_buffer: AudioBuffer) -> None:
        """Volume contour uses the same windowing as the pitch contour."""
        features = extract_features(flat_tone_buffer)
        expected_frames = 1 + (len(flat_tone_buffer) - 1024) // 512
        assert len(features.volume_contour) == expected_frames

    def test_duration_override(self, burst_buffer: AudioBuffer) -> None:
        """Pause frequency uses the supplied duration."""
        features = extract_features(burst_buffer, duration_sec=3.0)
        assert features.pause_frequency_per_sec == pytest.approx(1 / 3.0)

    def test_supplied_contour_is_used(self, flat_tone_buffer: AudioBuffer) -> None:
        """A supplied contour drives the pitch statistics."""
        contour = PitchContour(frequencies=np.array([100.0, 0.0, 300.0]), sample_rate=SAMPLE_RATE)
        features = extract_features(flat_tone_buffer, contour=contour)

        assert features.average_pitch == pytest.approx(200.0)
        assert features.pitch_variance == pytest.approx(10000.0)
        assert features.voice_shakiness == pytest.approx(200.0)

    def test_silence_has_no_speech(self) -> None:
        features = extract_features(np.zeros(SAMPLE_RATE), SAMPLE_RATE)

        assert features.volume == 0.0
        assert features.syllable_count == 0
        assert features.speech_rate_syllables_per_sec == 0.0
        assert len(features.pauses) == 1


class TestVoiceFeatureExtractor:
    """Tests for the configured extractor object."""

    def test_custom_silence_threshold(self, burst_buffer: AudioBuffer) -> None:
        """A silence threshold above the tone RMS turns everything into pause."""
        extractor = VoiceFeatureExtractor(VoiceConfig(silence_threshold=1.0))
        features = extractor.extract(burst_buffer)

        assert len(features.pauses) == 1
        assert features.pauses[0].start_sec == 0.0
        assert features.speaking_time_sec == 0.0
