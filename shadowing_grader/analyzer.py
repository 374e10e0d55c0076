"""One-call analysis of a shadowing attempt.

Runs pitch extraction, voice features, tone classification, emotion
estimation and assessment aggregation for a single utterance and bundles
the results into a ShadowingReport.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

import numpy as np

from .analytics.models import LearningSession, SessionScores
from .assessment import AssessmentAggregator, AssessmentResult, RawAsrResult
from .config import Config
from .emotion import EmotionalStateEstimator, EmotionRuleSet
from .features import VoiceFeatureExtractor
from .lexicon import ToneDictionary
from .pitch import PitchExtractor
from .tone import ToneClassifier, tone_summary
from .types import AudioBuffer, EmotionalState, NoData, PitchContour, ToneSegment, VoiceFeatureSet

logger = logging.getLogger(__name__)


@dataclass
class ShadowingReport:
    """Everything measured for one shadowing attempt."""

    expected_text: str
    duration_sec: float
    contour: PitchContour
    features: VoiceFeatureSet
    tones: list[ToneSegment]
    emotion: EmotionalState
    assessment: AssessmentResult | NoData = field(default_factory=NoData)

    @property
    def tone_accuracy(self) -> float | None:
        """Mean tone accuracy, None when the text has no CJK characters."""
        if not self.tones:
            return None
        return tone_summary(self.tones)["mean_accuracy"]

    @property
    def tone_mistakes(self) -> list[str]:
        return [
            f"{s.character} (tone {s.expected_tone} heard as {s.detected_tone})"
            for s in self.tones
            if not s.is_correct
        ]

    def to_session(
        self,
        session_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> LearningSession:
        """Build the LearningSession record for this attempt.

        Without an assessment, accuracy and overall fall back to the tone
        accuracy and fluency/completeness are 0.
        """
        if isinstance(self.assessment, AssessmentResult):
            scores = SessionScores(
                accuracy=self.assessment.accuracy_score,
                fluency=self.assessment.fluency_score,
                completeness=self.assessment.completeness_score,
                overall=self.assessment.overall_score,
            )
            mistakes = list(self.assessment.problem_words)
            improvements = list(self.assessment.improvements)
        else:
            tone = self.tone_accuracy or 0.0
            scores = SessionScores(accuracy=tone, overall=tone)
            mistakes, improvements = [], []

        extra: dict[str, Any] = {}
        if session_id is not None:
            extra["id"] = session_id
        if timestamp is not None:
            extra["timestamp"] = timestamp

        return LearningSession(
            duration_sec=self.duration_sec,
            scores=scores,
            mistakes=tuple(mistakes + self.tone_mistakes),
            improvements=tuple(improvements),
            emotional_state=self.emotion,
            tone_accuracy=self.tone_accuracy,
            **extra,
        )


class ShadowingAnalyzer:
    """Configured pipeline for analysing shadowing attempts.

    Usage:
        analyzer = ShadowingAnalyzer(load_config())
        report = analyzer.analyze(load_audio(path), "你好", partials=results)
        engine.add_session(report.to_session())
    """

    def __init__(
        self,
        config: Config | None = None,
        dictionary: ToneDictionary | None = None,
        rule_set: EmotionRuleSet | None = None,
    ):
        self.config = config or Config()
        cfg = self.config

        if dictionary is None and cfg.tone.dictionary_path is not None:
            dictionary = ToneDictionary.load(cfg.tone.dictionary_path, use_pypinyin=cfg.tone.use_pypinyin)
        if rule_set is None and cfg.emotion_rules_path is not None:
            rule_set = EmotionRuleSet.from_json_file(cfg.emotion_rules_path)

        self.pitch = PitchExtractor(cfg.pitch)
        self.voice = VoiceFeatureExtractor(cfg.voice, cfg.pitch)
        self.tones = ToneClassifier(dictionary=dictionary, config=cfg.tone)
        self.emotion = EmotionalStateEstimator(rule_set)
        self.aggregator = AssessmentAggregator(cfg.assessment)

    def analyze(
        self,
        buffer: AudioBuffer,
        expected_text: str,
        partials: Sequence[RawAsrResult | Mapping[str, Any]] | None = None,
        recognized_text: str | None = None,
    ) -> ShadowingReport:
        """Analyse one utterance.

        Args:
            buffer: The learner's recording.
            expected_text: The sentence being shadowed.
            partials: Partial results from the assessment service.
            recognized_text: What the recognizer heard. Defaults to the
                partials' recognized text joined together.

        Returns:
            ShadowingReport. ``assessment`` is NoData without partials.
        """
        contour = self.pitch.extract(buffer)
        features = self.voice.extract(buffer, contour=contour)
        tones = self.tones.classify(contour, expected_text)
        emotion = self.emotion.estimate(features)

        parsed = [RawAsrResult.parse(p) for p in partials or []]
        if recognized_text is None:
            recognized_text = " ".join(p.recognized_text for p in parsed if p.recognized_text)
        assessment = self.aggregator.aggregate(parsed, recognized_text, expected_text)

        logger.info(
            "Analysed %.2fs utterance: %d tones, mean tone accuracy %s, confidence %.0f",
            buffer.duration_sec,
            len(tones),
            f"{np.mean([t.accuracy for t in tones]):.1f}" if tones else "n/a",
            emotion.confidence,
        )

        return ShadowingReport(
            expected_text=expected_text,
            duration_sec=buffer.duration_sec,
            contour=contour,
            features=features,
            tones=tones,
            emotion=emotion,
            assessment=assessment,
        )
