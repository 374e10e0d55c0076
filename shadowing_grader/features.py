"""Voice feature extraction: volume, pauses, speech rate and jitter.

All measurements share the pitch extractor's windowing so that frame ``i``
of the volume contour and frame ``i`` of the pitch contour cover the same
samples.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from .audio import as_samples, frame_rms
from .config import PitchConfig, VoiceConfig
from .pitch import extract_pitch
from .types import AudioBuffer, PauseSegment, PitchContour, VoiceFeatureSet

logger = logging.getLogger(__name__)


def detect_pauses(
    rms: NDArray[np.floating],
    frame_sec: float,
    silence_threshold: float = 0.01,
    min_pause_sec: float = 0.2,
) -> list[PauseSegment]:
    """Find runs of quiet windows that last at least min_pause_sec.

    Args:
        rms: RMS energy per window.
        frame_sec: Hop duration in seconds.
        silence_threshold: RMS below which a window is silent.
        min_pause_sec: Minimum run length to count as a pause.

    Returns:
        Pauses in time order.
    """
    pauses: list[PauseSegment] = []
    run_start: int | None = None

    for i, silent in enumerate(rms < silence_threshold):
        if silent and run_start is None:
            run_start = i
        elif not silent and run_start is not None:
            duration = (i - run_start) * frame_sec
            if duration >= min_pause_sec:
                pauses.append(PauseSegment(start_sec=run_start * frame_sec, duration_sec=duration))
            run_start = None

    if run_start is not None:
        duration = (len(rms) - run_start) * frame_sec
        if duration >= min_pause_sec:
            pauses.append(PauseSegment(start_sec=run_start * frame_sec, duration_sec=duration))

    return pauses


def count_syllables(
    rms: NDArray[np.floating],
    ratio: float = 0.7,
) -> int:
    """Estimate syllables as upward crossings of ratio * mean RMS.

    The signal is treated as starting below the threshold, so speech that
    begins in the first window counts as one onset.
    """
    if len(rms) == 0:
        return 0

    threshold = ratio * float(np.mean(rms))
    if threshold <= 0:
        return 0

    above = rms >= threshold
    previous = np.concatenate(([False], above[:-1]))
    return int(np.sum(above & ~previous))


def pitch_jitter(voiced_f0: NDArray[np.floating]) -> float:
    """Mean absolute frame-to-frame F0 change over voiced frames (Hz)."""
    if len(voiced_f0) < 2:
        return 0.0
    return float(np.mean(np.abs(np.diff(voiced_f0))))


def extract_features(
    buffer: AudioBuffer | NDArray[np.floating],
    sample_rate: int | None = None,
    duration_sec: float | None = None,
    contour: PitchContour | None = None,
    config: VoiceConfig | None = None,
    pitch_config: PitchConfig | None = None,
) -> VoiceFeatureSet:
    """Derive the utterance-level voice feature set.

    Args:
        buffer: AudioBuffer or raw sample array.
        sample_rate: Sample rate in Hz (defaults to the buffer's own rate).
        duration_sec: Utterance duration used for pause frequency.
            Defaults to the buffer length.
        contour: Pitch contour of the same buffer. Extracted when omitted.
        config: Voice feature settings.
        pitch_config: Windowing and pitch settings.

    Returns:
        VoiceFeatureSet. Empty input gives an all-zero set.
    """
    cfg = config or VoiceConfig()
    pcfg = pitch_config or PitchConfig()

    if sample_rate is None:
        sample_rate = buffer.sample_rate if isinstance(buffer, AudioBuffer) else 16000
    samples = as_samples(buffer)

    if len(samples) == 0 or sample_rate <= 0:
        return VoiceFeatureSet.silent()

    if duration_sec is None or duration_sec <= 0:
        duration_sec = len(samples) / sample_rate

    frame_sec = pcfg.hop_length / sample_rate
    rms = frame_rms(samples, pcfg.window_size, pcfg.hop_length)

    # Volume
    mean_rms = float(np.mean(rms)) if len(rms) else 0.0
    volume = min(1.0, max(0.0, mean_rms / cfg.volume_reference)) if cfg.volume_reference > 0 else 0.0

    # Pauses
    pauses = detect_pauses(rms, frame_sec, cfg.silence_threshold, cfg.min_pause_sec)
    pause_frequency = len(pauses) / duration_sec if duration_sec > 0 else 0.0

    # Speech rate
    syllables = count_syllables(rms, cfg.syllable_ratio)
    speaking_time = float(np.sum(rms >= cfg.silence_threshold)) * frame_sec
    speech_rate = syllables / speaking_time if speaking_time > 0 else 0.0

    # Pitch statistics
    if contour is None:
        contour = extract_pitch(samples, sample_rate, config=pcfg)
    voiced = contour.voiced_frequencies
    average_pitch = float(np.mean(voiced)) if len(voiced) else 0.0
    pitch_variance = float(np.var(voiced)) if len(voiced) else 0.0
    shakiness = pitch_jitter(voiced)

    logger.debug(
        "Voice features: volume=%.3f rate=%.2f syl/s pauses=%d shakiness=%.2f",
        volume,
        speech_rate,
        len(pauses),
        shakiness,
    )

    return VoiceFeatureSet(
        average_pitch=average_pitch,
        pitch_variance=pitch_variance,
        volume=volume,
        speech_rate_syllables_per_sec=speech_rate,
        pause_frequency_per_sec=pause_frequency,
        voice_shakiness=shakiness,
        volume_contour=tuple(float(v) for v in rms),
        pauses=tuple(pauses),
        syllable_count=syllables,
        speaking_time_sec=speaking_time,
    )


class VoiceFeatureExtractor:
    """Configured voice feature extractor."""

    def __init__(
        self,
        config: VoiceConfig | None = None,
        pitch_config: PitchConfig | None = None,
    ):
        self.config = config or VoiceConfig()
        self.pitch_config = pitch_config or PitchConfig()

    def extract(
        self,
        buffer: AudioBuffer | NDArray[np.floating],
        sample_rate: int | None = None,
        duration_sec: float | None = None,
        contour: PitchContour | None = None,
    ) -> VoiceFeatureSet:
        return extract_features(
            buffer,
            sample_rate,
            duration_sec,
            contour=contour,
            config=self.config,
            pitch_config=self.pitch_config,
        )
