"""Pitch extraction from raw mono audio.

This module turns a PCM buffer into a PitchContour:
- Slice the buffer into windows (1024 samples, hop 512 by default)
- Estimate F0 per window with YIN or normalized autocorrelation
- Smooth the contour over voiced neighbours only

Invariants: every returned frequency is either 0 (unvoiced) or inside the
[fmin, fmax] search band, and an empty buffer gives an empty contour.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from .audio import as_samples, frame_signal
from .config import PitchConfig
from .errors import UnknownMethodError
from .types import AudioBuffer, PitchContour

logger = logging.getLogger(__name__)


def _lag_bounds(n: int, sr: int, fmin: float, fmax: float) -> tuple[int, int]:
    """Lag search range (in samples) for the frequency band."""
    tau_min = max(1, int(np.floor(sr / fmax)))
    tau_max = int(np.ceil(sr / fmin))
    if tau_max >= n // 2:
        tau_max = n // 2 - 1
    return tau_min, tau_max


def _parabolic_offset(alpha: float, beta: float, gamma: float) -> float:
    """Sub-sample offset of the extremum of a parabola through three points."""
    denom = alpha - 2 * beta + gamma
    if abs(denom) < 1e-12:
        return 0.0
    return float(np.clip(0.5 * (alpha - gamma) / denom, -0.5, 0.5))


def _yin_pitch(
    frame: NDArray[np.floating],
    sr: int,
    fmin: float,
    fmax: float,
    threshold: float = 0.15,
) -> float:
    """Extract pitch from a single frame using the YIN algorithm.

    Args:
        frame: Audio frame samples.
        sr: Sample rate.
        fmin: Minimum frequency to search.
        fmax: Maximum frequency to search.
        threshold: Absolute threshold on the normalized difference.

    Returns:
        F0 in Hz, or 0.0 if no dip falls below the threshold.
    """
    n = len(frame)
    tau_min, tau_max = _lag_bounds(n, sr, fmin, fmax)
    if tau_min >= tau_max:
        return 0.0

    # Difference function
    d = np.zeros(tau_max + 2)
    for tau in range(1, tau_max + 2):
        diff = frame[: n - tau] - frame[tau:n]
        d[tau] = np.dot(diff, diff)

    # Cumulative mean normalized difference
    cumsum = np.cumsum(d[1:])
    d_prime = np.ones_like(d)
    taus = np.arange(1, len(d))
    with np.errstate(divide="ignore", invalid="ignore"):
        d_prime[1:] = np.where(cumsum > 0, d[1:] * taus / cumsum, 1.0)

    # First dip below threshold, then follow it down to its local minimum
    below = np.nonzero(d_prime[tau_min : tau_max + 1] < threshold)[0]
    if len(below) == 0:
        return 0.0
    tau = tau_min + int(below[0])
    while tau + 1 <= tau_max and d_prime[tau + 1] < d_prime[tau]:
        tau += 1

    # Parabolic interpolation for sub-sample accuracy
    offset = _parabolic_offset(d_prime[tau - 1], d_prime[tau], d_prime[tau + 1])
    best_tau = tau + offset
    if best_tau <= 0:
        return 0.0

    return float(sr / best_tau)


def _autocorrelation_pitch(
    frame: NDArray[np.floating],
    sr: int,
    fmin: float,
    fmax: float,
    threshold: float = 0.3,
) -> float:
    """Extract pitch from a single frame by normalized autocorrelation.

    Args:
        frame: Audio frame samples.
        sr: Sample rate.
        fmin: Minimum frequency to search.
        fmax: Maximum frequency to search.
        threshold: Minimum normalized correlation to accept the peak.

    Returns:
        F0 in Hz, or 0.0 if the frame is silent or aperiodic.
    """
    n = len(frame)
    tau_min, tau_max = _lag_bounds(n, sr, fmin, fmax)
    if tau_min >= tau_max:
        return 0.0

    centered = frame - np.mean(frame)
    energy = float(np.dot(centered, centered))
    if energy <= 1e-10:
        return 0.0

    r = np.correlate(centered, centered, mode="full")[n - 1 :]
    r_norm = r / energy

    search = r_norm[tau_min : tau_max + 1]
    tau = tau_min + int(np.argmax(search))
    if r_norm[tau] < threshold:
        return 0.0
    # Only a local peak counts; a maximum on a slope at the band edge is not a period
    if r_norm[tau - 1] > r_norm[tau] or r_norm[tau + 1] > r_norm[tau]:
        return 0.0

    offset = _parabolic_offset(r_norm[tau - 1], r_norm[tau], r_norm[tau + 1])

    return float(sr / (tau + offset))


_METHODS = {
    "yin": _yin_pitch,
    "autocorrelation": _autocorrelation_pitch,
}


def smooth_contour(
    f0: NDArray[np.floating],
    radius: int = 5,
) -> NDArray[np.floating]:
    """Symmetric moving average over voiced neighbours.

    Each voiced frame becomes the mean of the voiced frames within
    +/- radius. Unvoiced frames (0) stay 0, so gaps are preserved.

    Args:
        f0: F0 per frame in Hz, 0 for unvoiced.
        radius: Number of frames on each side.

    Returns:
        Smoothed F0 array of the same shape.
    """
    f0 = np.asarray(f0, dtype=np.float64)
    if radius <= 0 or len(f0) == 0:
        return f0.copy()

    voiced = f0 > 0
    values = np.where(voiced, f0, 0.0)
    kernel = np.ones(2 * radius + 1)

    # Zero-pad so "valid" keeps the input length even when it is shorter than the kernel
    sums = np.convolve(np.pad(values, radius), kernel, mode="valid")
    counts = np.convolve(np.pad(voiced.astype(np.float64), radius), kernel, mode="valid")

    result = np.zeros_like(f0)
    result[voiced] = sums[voiced] / counts[voiced]
    return result


def extract_f0(
    samples: NDArray[np.floating],
    sr: int,
    config: PitchConfig | None = None,
) -> NDArray[np.floating]:
    """Raw (unsmoothed) F0 per window.

    Estimates outside [fmin, fmax] are reported as unvoiced.

    Args:
        samples: Mono audio samples normalized to [-1, 1].
        sr: Sample rate in Hz.
        config: Pitch settings.

    Returns:
        F0 values in Hz, shape [n_frames]. Unvoiced frames are 0.
    """
    cfg = config or PitchConfig()
    try:
        estimator = _METHODS[cfg.method]
    except KeyError:
        raise UnknownMethodError(f"Unknown pitch method: {cfg.method}") from None

    threshold = cfg.yin_threshold if cfg.method == "yin" else cfg.autocorrelation_threshold
    frames = frame_signal(samples, cfg.window_size, cfg.hop_length)

    f0 = np.zeros(len(frames), dtype=np.float64)
    for i, frame in enumerate(frames):
        f0[i] = estimator(frame, sr, cfg.fmin, cfg.fmax, threshold)

    out_of_band = (f0 > 0) & ((f0 < cfg.fmin) | (f0 > cfg.fmax))
    f0[out_of_band] = 0.0
    return f0


def extract_pitch(
    buffer: AudioBuffer | NDArray[np.floating],
    sample_rate: int | None = None,
    method: str | None = None,
    config: PitchConfig | None = None,
) -> PitchContour:
    """Extract a smoothed pitch contour from a mono buffer.

    Args:
        buffer: AudioBuffer or raw sample array.
        sample_rate: Sample rate in Hz (defaults to the buffer's own rate).
        method: "yin" or "autocorrelation" (overrides config.method).
        config: Pitch settings.

    Returns:
        PitchContour with one entry per window. Empty input gives an
        empty contour.
    """
    cfg = config or PitchConfig()
    if method is not None:
        cfg = cfg.model_copy(update={"method": method})

    if sample_rate is None:
        sample_rate = buffer.sample_rate if isinstance(buffer, AudioBuffer) else 16000
    samples = as_samples(buffer)

    if len(samples) == 0 or sample_rate <= 0:
        return PitchContour.empty(sample_rate=max(sample_rate, 0), hop_length=cfg.hop_length)

    raw = extract_f0(samples, sample_rate, cfg)
    smoothed = smooth_contour(raw, cfg.smoothing_radius)
    # Clip rounding drift back into the band
    smoothed = np.where(smoothed > 0, np.clip(smoothed, cfg.fmin, cfg.fmax), 0.0)

    logger.debug(
        "Extracted %d pitch frames (%d voiced) with %s",
        len(smoothed),
        int(np.sum(smoothed > 0)),
        cfg.method,
    )
    return PitchContour(frequencies=smoothed, sample_rate=sample_rate, hop_length=cfg.hop_length)


class PitchExtractor:
    """Configured pitch extractor.

    Thin object wrapper around extract_pitch so analysers can hold one
    configured instance.
    """

    def __init__(self, config: PitchConfig | None = None):
        self.config = config or PitchConfig()

    @property
    def name(self) -> str:
        return f"pitch_{self.config.method}"

    def extract(
        self,
        buffer: AudioBuffer | NDArray[np.floating],
        sample_rate: int | None = None,
    ) -> PitchContour:
        return extract_pitch(buffer, sample_rate, config=self.config)
