"""Merge partial ASR assessment results into one utterance assessment."""

import logging
import re
from typing import Any, Mapping, Sequence

from ..config import AssessmentConfig
from ..types import NoData, clamp
from .diagnostics import diagnose_word, score_tier_advice
from .models import AssessmentResult, ErrorStatistics, RawAsrResult, WordScore

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"[\s,.!?;:\"'()\[\]，。！？、；：“”‘’「」『』（）《》…—]+")

# (field, strength label, improvement label)
SCORE_LABELS = [
    ("accuracy_score", "Accurate pronunciation", "Basic pronunciation accuracy"),
    ("fluency_score", "Good fluency", "Speaking pace and rhythm"),
    ("completeness_score", "Complete sentences", "Sentence completeness"),
    ("prosody_score", "Natural intonation", "Tones and intonation"),
]

PartialResult = RawAsrResult | Mapping[str, Any]


def tokenize(text: str) -> list[str]:
    """Split text on whitespace and CJK/ASCII punctuation."""
    return [t for t in TOKEN_SPLIT.split(text) if t]


def word_matches(word: str, tokens: Sequence[str]) -> bool:
    """Substring containment against any token, in either direction."""
    if not word:
        return False
    return any(word in token or token in word for token in tokens)


def _recommendations(
    result: AssessmentResult,
    expected_text: str,
    config: AssessmentConfig,
) -> tuple[list[str], list[str], list[str]]:
    strengths: list[str] = []
    improvements: list[str] = []
    for name, strength, improvement in SCORE_LABELS:
        score = getattr(result, name)
        if score is None:
            continue
        if score >= config.strength_threshold:
            strengths.append(strength)
        elif score < config.improvement_threshold:
            improvements.append(improvement)

    mispronounced = [w.text for w in result.words if w.error_type == "Mispronunciation"]
    if mispronounced:
        improvements.append(f"Mispronounced words: {', '.join(dict.fromkeys(mispronounced))}")

    next_steps = [score_tier_advice(result.average_score)]
    if result.problem_words:
        next_steps.append(f"Practice these words slowly: {', '.join(result.problem_words)}")
    if any(d.category == "tone" for d in result.word_diagnostics):
        next_steps.append("Drill the four tone contours before shadowing again.")
    if result.error_statistics.unexpected_breaks or result.error_statistics.omissions:
        target = f" '{expected_text}'" if expected_text else ""
        next_steps.append(f"Shadow the full sentence{target} in one breath without stopping.")
    return strengths, improvements, next_steps


def aggregate(
    partial_results: Sequence[PartialResult],
    recognized_text: str,
    expected_text: str,
    config: AssessmentConfig | None = None,
) -> AssessmentResult | NoData:
    """Merge partial assessment results for one utterance.

    Args:
        partial_results: Raw partial results (dicts in the service's shape)
            or already parsed RawAsrResult records.
        recognized_text: What the learner actually said, per the recognizer.
            Blank text falls back to expected_text for word matching.
        expected_text: The sentence being shadowed.
        config: Recommendation thresholds.

    Returns:
        AssessmentResult with scores averaged over the number of partial
        results, or NoData when there are none.
    """
    cfg = config or AssessmentConfig()
    if not partial_results:
        return NoData(reason="no_partial_results")

    parsed = [RawAsrResult.parse(p) for p in partial_results]
    tokens = tokenize(recognized_text) or tokenize(expected_text)
    count = len(parsed)

    words: list[WordScore] = []
    for partial in parsed:
        words.extend(w for w in partial.words if word_matches(w.text, tokens))

    prosody = [p.prosody_score for p in parsed if p.prosody_score is not None]

    result = AssessmentResult(
        accuracy_score=clamp(sum(p.accuracy_score for p in parsed) / count),
        fluency_score=clamp(sum(p.fluency_score for p in parsed) / count),
        completeness_score=clamp(sum(p.completeness_score for p in parsed) / count),
        pron_score=clamp(sum(p.pron_score for p in parsed) / count),
        prosody_score=clamp(sum(prosody) / len(prosody)) if prosody else None,
        words=words,
        error_statistics=ErrorStatistics.from_words(words),
        partial_count=count,
    )

    result.problem_words = list(
        dict.fromkeys(w.text for w in words if w.accuracy_score < cfg.problem_word_threshold)
    )
    diagnostics = [
        diagnose_word(w, cfg.problem_phoneme_threshold, cfg.tone_error_threshold) for w in words
    ]
    result.word_diagnostics = [d for d in diagnostics if d.severity != "low"]
    result.strengths, result.improvements, result.next_steps = _recommendations(result, expected_text, cfg)

    logger.debug(
        "Aggregated %d partials: accuracy=%.1f, %d/%d words matched",
        count,
        result.accuracy_score,
        len(words),
        sum(len(p.words) for p in parsed),
    )
    return result


class AssessmentAggregator:
    """Configured assessment aggregator."""

    def __init__(self, config: AssessmentConfig | None = None):
        self.config = config or AssessmentConfig()

    def aggregate(
        self,
        partial_results: Sequence[PartialResult],
        recognized_text: str,
        expected_text: str,
    ) -> AssessmentResult | NoData:
        return aggregate(partial_results, recognized_text, expected_text, self.config)
