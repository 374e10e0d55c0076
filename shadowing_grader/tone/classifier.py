"""Per-syllable Mandarin tone classification from a pitch contour."""

import logging
from typing import cast

import numpy as np

from ..config import ToneConfig
from ..lexicon import ToneDictionary, cjk_characters
from ..types import PitchContour, Tone, ToneSegment, clamp
from .templates import match_templates, normalize_curve

logger = logging.getLogger(__name__)


def tone_accuracy(
    detected: int,
    expected: int,
    confidence: float,
    step_penalty: float = 25.0,
) -> float:
    """Accuracy (0-100) of a detected tone against the expected one.

    A correct tone scores its confidence; each tone step of mismatch
    costs step_penalty points from 100.
    """
    if detected == expected:
        return clamp(confidence * 100.0)
    return clamp(100.0 - step_penalty * abs(detected - expected))


def split_contour(frequencies: np.ndarray, n_parts: int) -> list[np.ndarray]:
    """Divide a contour uniformly into n_parts consecutive slices."""
    total = len(frequencies)
    bounds = [(i * total) // n_parts for i in range(n_parts + 1)]
    return [frequencies[bounds[i] : bounds[i + 1]] for i in range(n_parts)]


class ToneClassifier:
    """Template-based tone classifier.

    Splits the utterance contour evenly across the characters of the spoken
    text, normalizes each slice to its own pitch range and picks the
    closest canonical tone shape.

    Limitations:
    - Uniform division, not phoneme-aligned
    - No tone sandhi; expected tones come straight from the dictionary
    """

    def __init__(
        self,
        dictionary: ToneDictionary | None = None,
        config: ToneConfig | None = None,
    ):
        self.config = config or ToneConfig()
        if dictionary is None:
            dictionary = ToneDictionary(use_pypinyin=self.config.use_pypinyin)
        self.dictionary = dictionary

    @property
    def name(self) -> str:
        return "template"

    def classify_syllable(
        self,
        f0: np.ndarray,
        character: str,
        expected: Tone,
    ) -> ToneSegment:
        """Classify one syllable's slice of the contour."""
        cfg = self.config
        voiced = f0[f0 > 0]

        if len(voiced) < cfg.min_voiced_frames:
            detected, confidence = 0, 0.0
            curve = np.zeros(0)
        elif float(np.max(voiced) - np.min(voiced)) < cfg.flat_range_hz:
            # Flat pitch is first tone by definition
            detected, confidence = 1, cfg.flat_confidence
            curve = normalize_curve(voiced)
        else:
            curve = normalize_curve(voiced)
            detected, confidence, _ = match_templates(curve)

        confidence = clamp(confidence, 0.0, 1.0)
        # Unvoiced syllables earn no credit
        accuracy = tone_accuracy(detected, expected, confidence, cfg.step_penalty) if len(curve) else 0.0
        return ToneSegment(
            character=character,
            detected_tone=cast(Tone, detected),
            expected_tone=expected,
            confidence=confidence,
            accuracy=accuracy,
            pitch_curve=tuple(float(v) for v in curve),
        )

    def classify(self, contour: PitchContour, spoken_text: str) -> list[ToneSegment]:
        """Assign a detected and expected tone to every CJK character.

        Args:
            contour: Pitch contour of the whole utterance.
            spoken_text: Text the learner was shadowing.

        Returns:
            One ToneSegment per CJK character, in text order. Text without
            CJK characters gives an empty list.
        """
        chars = cjk_characters(spoken_text)
        if not chars:
            return []

        expected_tones = self.dictionary.tones_for(spoken_text)
        slices = split_contour(contour.frequencies, len(chars))

        segments = [
            self.classify_syllable(f0, char, expected)
            for f0, char, expected in zip(slices, chars, expected_tones)
        ]

        logger.debug(
            "Classified %d syllables, %d correct",
            len(segments),
            sum(s.is_correct for s in segments),
        )
        return segments


def classify_tones(
    pitch_contour: PitchContour,
    spoken_text: str,
    dictionary: ToneDictionary | None = None,
    config: ToneConfig | None = None,
) -> list[ToneSegment]:
    """Classify tones for spoken_text using a one-off ToneClassifier."""
    return ToneClassifier(dictionary=dictionary, config=config).classify(pitch_contour, spoken_text)


def tone_summary(segments: list[ToneSegment]) -> dict[str, float]:
    """Mean accuracy and share of correct tones across segments."""
    if not segments:
        return {"mean_accuracy": 0.0, "correct_ratio": 0.0}
    return {
        "mean_accuracy": float(np.mean([s.accuracy for s in segments])),
        "correct_ratio": sum(s.is_correct for s in segments) / len(segments),
    }
