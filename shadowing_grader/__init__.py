"""
Shadowing Grader - Speech analysis and pronunciation assessment for shadowing practice.

This library turns a learner's recording and the partner pronunciation
service's partial results into pitch, voice, tone, emotion and assessment
measurements, and tracks progress across practice sessions.

Modules:
    types: Type definitions and data structures
    pitch: Pitch contour extraction (YIN / autocorrelation)
    features: Volume, pauses, speech rate and jitter
    tone: Per-syllable tone classification against templates
    lexicon: Reference tone dictionary
    emotion: Rule-based affect estimation
    assessment: Merging partial ASR assessment results
    analytics: Learning profile and advice over a session log
    analyzer: One-call analysis of a shadowing attempt
"""

from .analytics import (
    Advice,
    LearningAnalyticsEngine,
    LearningProfile,
    LearningSession,
    SessionScores,
    SessionStore,
    WeakArea,
)
from .analyzer import ShadowingAnalyzer, ShadowingReport
from .assessment import (
    AssessmentAggregator,
    AssessmentResult,
    ErrorStatistics,
    RawAsrResult,
    WordScore,
    aggregate,
)
from .audio import load_audio
from .config import Config, load_config
from .emotion import EmotionalStateEstimator, EmotionRule, EmotionRuleSet, estimate_emotion
from .errors import ShadowingGraderError
from .features import VoiceFeatureExtractor, extract_features
from .lexicon import ToneDictionary
from .pitch import PitchExtractor, extract_pitch
from .tone import ToneClassifier, classify_tones
from .types import (
    AudioBuffer,
    EmotionalState,
    NoData,
    PauseSegment,
    PitchContour,
    Tone,
    ToneSegment,
    VoiceFeatureSet,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Tone",
    "AudioBuffer",
    "PitchContour",
    "PauseSegment",
    "VoiceFeatureSet",
    "ToneSegment",
    "EmotionalState",
    "NoData",
    # Config
    "Config",
    "load_config",
    "ShadowingGraderError",
    # Audio
    "load_audio",
    # Pitch
    "PitchExtractor",
    "extract_pitch",
    # Features
    "VoiceFeatureExtractor",
    "extract_features",
    # Tone
    "ToneClassifier",
    "ToneDictionary",
    "classify_tones",
    # Emotion
    "EmotionalStateEstimator",
    "EmotionRule",
    "EmotionRuleSet",
    "estimate_emotion",
    # Assessment
    "AssessmentAggregator",
    "AssessmentResult",
    "ErrorStatistics",
    "RawAsrResult",
    "WordScore",
    "aggregate",
    # Analytics
    "Advice",
    "LearningAnalyticsEngine",
    "LearningProfile",
    "LearningSession",
    "SessionScores",
    "SessionStore",
    "WeakArea",
    # Analyzer
    "ShadowingAnalyzer",
    "ShadowingReport",
]
