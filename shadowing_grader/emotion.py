"""Rule-based affect estimation from voice features.

Each of the five scores starts from a baseline and collects additive
adjustments from a table of ``{feature, band, adjustment}`` rules. Each
score responds monotonically to a feature in the direction its table
documents and is clamped to [0, 100].
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .errors import EmotionRulesError
from .types import EMOTION_FIELDS, EmotionalState, VoiceFeatureSet, clamp

logger = logging.getLogger(__name__)

FEATURE_NAMES = (
    "average_pitch",
    "pitch_variance",
    "volume",
    "speech_rate_syllables_per_sec",
    "pause_frequency_per_sec",
    "voice_shakiness",
)


class EmotionRule(BaseModel):
    """Adjust a score when a feature falls inside a closed band.

    ``low``/``high`` of None leave that side unbounded.
    """

    feature: str
    low: float | None = None
    high: float | None = None
    adjustment: float

    model_config = {"frozen": True}

    def matches(self, features: VoiceFeatureSet) -> bool:
        value = float(getattr(features, self.feature))
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True


def _rule(feature: str, low: float | None, high: float | None, adjustment: float) -> EmotionRule:
    return EmotionRule(feature=feature, low=low, high=high, adjustment=adjustment)


DEFAULT_BASELINES: dict[str, float] = {
    "confidence": 50.0,
    "nervousness": 0.0,
    "excitement": 0.0,
    "frustration": 0.0,
    "motivation": 50.0,
}

# Units: volume 0..1, pitch variance Hz^2, speech rate syllables/s,
# pause frequency pauses/s, shakiness mean |delta f0| in Hz.
DEFAULT_RULES: dict[str, list[EmotionRule]] = {
    "confidence": [
        _rule("volume", None, 0.3, -15),
        _rule("volume", 0.6, None, 10),
        _rule("pitch_variance", 10, 50, 20),
        _rule("speech_rate_syllables_per_sec", 2, 6, 10),
        _rule("speech_rate_syllables_per_sec", 8, None, -20),
        _rule("pause_frequency_per_sec", 0.5, None, -15),
        _rule("voice_shakiness", 15, None, -15),
    ],
    "nervousness": [
        _rule("voice_shakiness", 8, None, 25),
        _rule("voice_shakiness", 15, None, 20),
        _rule("pause_frequency_per_sec", 0.5, None, 20),
        _rule("speech_rate_syllables_per_sec", 8, None, 20),
        _rule("volume", None, 0.3, 15),
        _rule("pitch_variance", 200, None, 15),
    ],
    "excitement": [
        _rule("volume", 0.6, None, 25),
        _rule("pitch_variance", 100, None, 30),
        _rule("speech_rate_syllables_per_sec", 5, None, 25),
        _rule("pause_frequency_per_sec", None, 0.2, 10),
    ],
    "frustration": [
        _rule("pause_frequency_per_sec", 0.5, None, 25),
        _rule("voice_shakiness", 15, None, 20),
        _rule("speech_rate_syllables_per_sec", None, 1.5, 20),
        _rule("volume", 0.8, None, 15),
        _rule("pitch_variance", None, 5, 10),
    ],
    "motivation": [
        _rule("volume", 0.5, None, 15),
        _rule("volume", None, 0.2, -15),
        _rule("speech_rate_syllables_per_sec", 3, 7, 15),
        _rule("pause_frequency_per_sec", 0.5, None, -15),
        _rule("pitch_variance", 20, 150, 10),
        _rule("pitch_variance", None, 5, -10),
    ],
}


class EmotionRuleSet(BaseModel):
    """Baselines and rule tables for all five affect scores."""

    baselines: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_BASELINES))
    rules: dict[str, list[EmotionRule]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_RULES.items()}
    )

    @classmethod
    def from_json_file(cls, path: Path) -> "EmotionRuleSet":
        """Load a rule set from a JSON file.

        Scores missing from the file keep their default baseline and rules.

        Raises:
            EmotionRulesError: If the file is unreadable or malformed.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            loaded = cls.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise EmotionRulesError(f"Cannot load emotion rules from {path}: {e}") from e

        defaults = cls()
        rule_set = cls(
            baselines={**defaults.baselines, **loaded.baselines},
            rules={**defaults.rules, **loaded.rules},
        )
        logger.info("Loaded emotion rules for %s from %s", sorted(loaded.rules), path)
        return rule_set

    def validate_features(self) -> None:
        """Raise EmotionRulesError if a rule references an unknown feature."""
        for score, rules in self.rules.items():
            for rule in rules:
                if rule.feature not in FEATURE_NAMES:
                    raise EmotionRulesError(f"Rule for {score} uses unknown feature {rule.feature!r}")


class EmotionalStateEstimator:
    """Score confidence, nervousness, excitement, frustration and motivation."""

    def __init__(self, rule_set: EmotionRuleSet | None = None):
        self.rule_set = rule_set or EmotionRuleSet()
        self.rule_set.validate_features()

    def score(self, name: str, features: VoiceFeatureSet) -> float:
        """Compute one affect score (clamped to 0-100)."""
        value = self.rule_set.baselines.get(name, 0.0)
        for rule in self.rule_set.rules.get(name, []):
            if rule.matches(features):
                value += rule.adjustment
        return clamp(value)

    def explain(self, name: str, features: VoiceFeatureSet) -> list[EmotionRule]:
        """Rules that fired for one score."""
        return [r for r in self.rule_set.rules.get(name, []) if r.matches(features)]

    def estimate(self, features: VoiceFeatureSet) -> EmotionalState:
        scores = {name: self.score(name, features) for name in EMOTION_FIELDS}
        logger.debug("Emotion scores: %s", scores)
        return EmotionalState(**scores)


def estimate_emotion(
    features: VoiceFeatureSet,
    rule_set: EmotionRuleSet | None = None,
) -> EmotionalState:
    """Estimate the five affect scores for one utterance."""
    return EmotionalStateEstimator(rule_set).estimate(features)
