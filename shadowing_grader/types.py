"""Type definitions and data structures for shadowing analysis."""

from dataclasses import dataclass, field
from typing import Literal

import numpy as np
from numpy.typing import NDArray

# Type aliases
Tone = Literal[0, 1, 2, 3, 4]  # 0 = neutral, 1-4 = standard tones

EMOTION_FIELDS = ("confidence", "nervousness", "excitement", "frustration", "motivation")


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score to [low, high], mapping NaN to low."""
    if value != value:  # NaN
        return low
    return float(min(high, max(low, value)))


@dataclass(frozen=True)
class AudioBuffer:
    """Mono PCM samples normalized to [-1, 1] plus their sample rate."""

    samples: NDArray[np.floating]
    sample_rate: int

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples, dtype=np.float64).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def is_empty(self) -> bool:
        return len(self.samples) == 0

    @property
    def duration_sec(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class PitchContour:
    """Fundamental-frequency estimate per analysis window.

    Frame ``i`` starts at sample ``i * hop_length``. A frequency of 0 marks
    an unvoiced frame (silence, noise or no reliable periodicity).
    """

    frequencies: NDArray[np.floating]  # shape [T], Hz
    sample_rate: int
    hop_length: int = 512

    def __post_init__(self) -> None:
        freqs = np.asarray(self.frequencies, dtype=np.float64).reshape(-1)
        freqs.setflags(write=False)
        object.__setattr__(self, "frequencies", freqs)

    def __len__(self) -> int:
        return len(self.frequencies)

    def __iter__(self):
        return iter(self.frames)

    @property
    def frames(self) -> list[tuple[int, float]]:
        """(frame_index, frequency_hz) pairs."""
        return [(i, float(f)) for i, f in enumerate(self.frequencies)]

    @property
    def is_empty(self) -> bool:
        return len(self.frequencies) == 0

    @property
    def voiced_frequencies(self) -> NDArray[np.floating]:
        return self.frequencies[self.frequencies > 0]

    @property
    def frame_duration_sec(self) -> float:
        return self.hop_length / self.sample_rate if self.sample_rate > 0 else 0.0

    @classmethod
    def empty(cls, sample_rate: int, hop_length: int = 512) -> "PitchContour":
        return cls(frequencies=np.zeros(0), sample_rate=sample_rate, hop_length=hop_length)


@dataclass(frozen=True)
class PauseSegment:
    """A stretch of sustained silence."""

    start_sec: float
    duration_sec: float


@dataclass(frozen=True)
class VoiceFeatureSet:
    """Utterance-level voice features used for affect estimation."""

    average_pitch: float  # Hz over voiced frames
    pitch_variance: float  # Hz^2 over voiced frames
    volume: float  # 0..1, mean RMS relative to the reference level
    speech_rate_syllables_per_sec: float
    pause_frequency_per_sec: float
    voice_shakiness: float  # mean |delta f0| between voiced frames, Hz
    volume_contour: tuple[float, ...] = ()
    pauses: tuple[PauseSegment, ...] = ()
    syllable_count: int = 0
    speaking_time_sec: float = 0.0

    @classmethod
    def silent(cls) -> "VoiceFeatureSet":
        """All-zero feature set for empty input."""
        return cls(
            average_pitch=0.0,
            pitch_variance=0.0,
            volume=0.0,
            speech_rate_syllables_per_sec=0.0,
            pause_frequency_per_sec=0.0,
            voice_shakiness=0.0,
        )


@dataclass(frozen=True)
class ToneSegment:
    """Tone judgement for one syllable of the target text."""

    character: str
    detected_tone: Tone
    expected_tone: Tone
    confidence: float  # 0..1
    accuracy: float  # 0..100
    pitch_curve: tuple[float, ...] = ()  # normalized 0..1

    @property
    def is_correct(self) -> bool:
        return self.detected_tone == self.expected_tone


@dataclass(frozen=True)
class EmotionalState:
    """Five independently bounded affect scores (0..100)."""

    confidence: float
    nervousness: float
    excitement: float
    frustration: float
    motivation: float

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in EMOTION_FIELDS}

    @property
    def dominant(self) -> str:
        """Name of the highest-scoring affect (first wins on ties)."""
        scores = self.as_dict()
        return max(scores, key=scores.get)  # type: ignore

    @property
    def label(self) -> Literal["confident", "nervous"]:
        return "confident" if self.confidence > 70 else "nervous"


@dataclass(frozen=True)
class NoData:
    """Returned instead of a result when there is nothing to analyse."""

    reason: str = "no_partial_results"
    details: tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return False
