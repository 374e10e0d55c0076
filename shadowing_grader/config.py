"""Configuration loading for shadowing-grader.

Every threshold the analysers use lives here so it can be tuned from the
environment (``SHADOWING_PITCH__FMAX=600``) or a ``.env`` file without
touching control flow.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class PitchConfig(BaseModel):
    """Pitch extraction settings."""

    method: Literal["yin", "autocorrelation"] = "yin"
    window_size: int = Field(default=1024, gt=0)
    hop_length: int = Field(default=512, gt=0)
    fmin: float = Field(default=80.0, gt=0)
    fmax: float = Field(default=800.0, gt=0)
    yin_threshold: float = 0.15
    autocorrelation_threshold: float = 0.3  # Min normalized peak to count as voiced
    smoothing_radius: int = 5  # Frames on each side


class VoiceConfig(BaseModel):
    """Voice feature extraction settings."""

    silence_threshold: float = 0.01  # RMS
    min_pause_sec: float = 0.2
    syllable_ratio: float = 0.7  # Onset threshold relative to mean RMS
    volume_reference: float = 0.1  # RMS that maps to volume 1.0


class ToneConfig(BaseModel):
    """Tone classification settings."""

    flat_range_hz: float = 20.0
    flat_confidence: float = 0.8
    step_penalty: float = 25.0  # Accuracy lost per tone step of mismatch
    min_voiced_frames: int = 2
    use_pypinyin: bool = False  # Fall back to pypinyin for unknown characters
    dictionary_path: Optional[Path] = None  # JSON {word: [tones]}


class AssessmentConfig(BaseModel):
    """Thresholds for assessment recommendations."""

    strength_threshold: float = 80.0
    improvement_threshold: float = 60.0
    problem_word_threshold: float = 70.0
    problem_phoneme_threshold: float = 70.0
    tone_error_threshold: float = 60.0


class AnalyticsConfig(BaseModel):
    """Learning analytics settings."""

    average_window: int = 10
    weak_window: int = 5
    weak_threshold: float = 75.0
    strength_threshold: float = 85.0
    style_margin: float = 5.0


class Config(BaseSettings):
    """Application configuration."""

    pitch: PitchConfig = Field(default_factory=PitchConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    tone: ToneConfig = Field(default_factory=ToneConfig)
    assessment: AssessmentConfig = Field(default_factory=AssessmentConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    emotion_rules_path: Optional[Path] = None
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "SHADOWING_",
        "env_file": ".env",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
