"""Pytest configuration and fixtures for shadowing_grader tests."""

import wave
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from numpy.typing import NDArray

from shadowing_grader.analytics import LearningSession, SessionScores
from shadowing_grader.types import AudioBuffer, VoiceFeatureSet

SAMPLE_RATE = 16000
TODAY = date(2024, 6, 15)


def sine(
    freq_hz: float,
    duration_sec: float,
    sr: int = SAMPLE_RATE,
    amplitude: float = 0.5,
) -> NDArray[np.floating]:
    """Pure sine wave."""
    t = np.arange(int(duration_sec * sr)) / sr
    return amplitude * np.sin(2 * np.pi * freq_hz * t)


def write_wav(path: Path, samples: NDArray[np.floating], sr: int = SAMPLE_RATE) -> Path:
    """Write float samples as 16-bit mono WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(pcm.tobytes())
    return path


@pytest.fixture
def flat_tone_buffer() -> AudioBuffer:
    """500 ms of a steady 220 Hz tone."""
    return AudioBuffer(samples=sine(220.0, 0.5), sample_rate=SAMPLE_RATE)


@pytest.fixture
def burst_buffer() -> AudioBuffer:
    """Two 500 ms tone bursts separated by 500 ms of silence."""
    tone = sine(200.0, 0.5)
    gap = np.zeros(int(0.5 * SAMPLE_RATE))
    return AudioBuffer(samples=np.concatenate([tone, gap, tone]), sample_rate=SAMPLE_RATE)


@pytest.fixture
def neutral_features() -> VoiceFeatureSet:
    """Features that fall outside every confidence rule band."""
    return VoiceFeatureSet(
        average_pitch=200.0,
        pitch_variance=60.0,
        volume=0.4,
        speech_rate_syllables_per_sec=7.0,
        pause_frequency_per_sec=0.3,
        voice_shakiness=5.0,
    )


@pytest.fixture
def make_session() -> Callable[..., LearningSession]:
    """Factory for sessions with uniform category scores."""

    def _make(
        score: float,
        days_ago: int = 0,
        fluency: float | None = None,
        completeness: float | None = None,
        **kwargs,
    ) -> LearningSession:
        fluency = score if fluency is None else fluency
        completeness = score if completeness is None else completeness
        return LearningSession(
            timestamp=datetime.combine(TODAY - timedelta(days=days_ago), datetime.min.time())
            + timedelta(hours=12),
            duration_sec=60.0,
            scores=SessionScores(
                accuracy=score,
                fluency=fluency,
                completeness=completeness,
                overall=(score + fluency + completeness) / 3,
            ),
            **kwargs,
        )

    return _make
