"""Audio loading and framing utilities."""

from pathlib import Path

import librosa
import numpy as np
from numpy.typing import NDArray

from .types import AudioBuffer

# Target sample rate for file input
TARGET_SR = 16000


def load_audio(path: Path, target_sr: int = TARGET_SR) -> AudioBuffer:
    """Load audio file as a mono buffer resampled to target rate.

    Args:
        path: Path to audio file (supports WAV, MP3, M4A, etc.)
        target_sr: Target sample rate in Hz

    Returns:
        AudioBuffer with samples normalized to [-1, 1]
    """
    audio, sr = librosa.load(str(path), sr=target_sr, mono=True)
    return AudioBuffer(samples=audio, sample_rate=int(sr))


def as_samples(buffer: AudioBuffer | NDArray[np.floating]) -> NDArray[np.floating]:
    """Return float64 samples from a buffer or raw array."""
    if isinstance(buffer, AudioBuffer):
        return buffer.samples
    return np.asarray(buffer, dtype=np.float64).reshape(-1)


def frame_signal(
    samples: NDArray[np.floating],
    window_size: int = 1024,
    hop_length: int = 512,
) -> NDArray[np.floating]:
    """Slice samples into overlapping analysis windows.

    A non-empty signal shorter than one window is zero-padded to a single
    window. An empty signal yields zero frames.

    Args:
        samples: Mono samples.
        window_size: Window length in samples.
        hop_length: Hop between window starts in samples.

    Returns:
        Array of shape [n_frames, window_size].
    """
    if len(samples) == 0:
        return np.zeros((0, window_size), dtype=np.float64)

    y = np.asarray(samples, dtype=np.float64)
    if len(y) < window_size:
        y = np.pad(y, (0, window_size - len(y)), mode="constant")

    # librosa frames along the last axis: [window_size, n_frames]
    frames = librosa.util.frame(y, frame_length=window_size, hop_length=hop_length)
    return np.ascontiguousarray(frames.T)


def frame_rms(
    samples: NDArray[np.floating],
    window_size: int = 1024,
    hop_length: int = 512,
) -> NDArray[np.floating]:
    """Compute RMS energy per analysis window (same framing as frame_signal)."""
    if len(samples) == 0:
        return np.zeros(0, dtype=np.float64)

    y = np.asarray(samples, dtype=np.float64)
    if len(y) < window_size:
        y = np.pad(y, (0, window_size - len(y)), mode="constant")

    rms = librosa.feature.rms(
        y=y,
        frame_length=window_size,
        hop_length=hop_length,
        center=False,
    )[0]
    return rms.astype(np.float64)
