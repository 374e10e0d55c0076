"""Pronunciation assessment models.

Partial ASR results arrive as loosely shaped JSON from the partner
assessment service. ``RawAsrResult.parse`` turns one of them into a
validated record with every optional field defaulted, so the aggregator
only ever sees clean numbers.
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_args

from pydantic import BaseModel, Field, field_validator

from ..types import clamp

logger = logging.getLogger(__name__)

ErrorType = Literal["None", "Mispronunciation", "Omission", "Insertion", "UnexpectedBreak"]
ERROR_TYPES: tuple[str, ...] = get_args(ErrorType)

ErrorCategory = Literal["tone", "consonant", "vowel", "rhythm"]
Severity = Literal["low", "medium", "high"]


def _score(value: Any, field: str) -> Optional[float]:
    """Coerce an external score to float, None when absent or unusable."""
    if value is None:
        return None
    try:
        return clamp(float(value))
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s: %r", field, value)
        return None


def _error_type(value: Any) -> ErrorType:
    if value is None or value == "":
        return "None"
    if value not in ERROR_TYPES:
        logger.warning("Unknown error type %r, treating as None", value)
        return "None"
    return value


class PhonemeScore(BaseModel):
    """Accuracy of one phoneme within a word."""

    phoneme: str = ""
    accuracy_score: float = 0.0

    @field_validator("accuracy_score")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp(v)


class WordScore(BaseModel):
    """Accuracy and error type of one recognized word."""

    text: str
    accuracy_score: float = 0.0
    error_type: ErrorType = "None"
    phonemes: list[PhonemeScore] = Field(default_factory=list)

    @field_validator("accuracy_score")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp(v)

    @property
    def is_correct(self) -> bool:
        return self.error_type == "None"


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    """Nested object of an external result, {} when absent or malformed."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    logger.warning("Ignoring %s: expected an object, got %s", what, type(value).__name__)
    return {}


def _list(value: Any, what: str) -> list[Any]:
    """Nested array of an external result, [] when absent or malformed."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    logger.warning("Ignoring %s: expected an array, got %s", what, type(value).__name__)
    return []


def _phonemes(entries: Any, nested_key: str | None) -> list[PhonemeScore]:
    phonemes = []
    for entry in _list(entries, "phonemes"):
        if not isinstance(entry, Mapping):
            continue
        if nested_key:
            assessment = _mapping(
                entry.get(nested_key) or entry.get("PronunciationAssessment"), "phoneme assessment"
            )
            name = entry.get("Phoneme", "")
            value = assessment.get("AccuracyScore")
        else:
            name = entry.get("phoneme", "")
            value = entry.get("accuracyScore")
        phonemes.append(
            PhonemeScore(phoneme=str(name or ""), accuracy_score=_score(value, "phoneme accuracy") or 0.0)
        )
    return phonemes


class RawAsrResult(BaseModel):
    """One partial recognition turn, parsed and defaulted.

    Utterance scores that the service did not send are None here; the
    aggregator treats them as 0. ``prosody_score`` stays None when the
    service never scores prosody. Malformed nested blocks are logged and
    treated as absent.
    """

    recognized_text: str = ""
    accuracy_score: float = 0.0
    fluency_score: float = 0.0
    completeness_score: float = 0.0
    pron_score: float = 0.0
    prosody_score: Optional[float] = None
    words: list[WordScore] = Field(default_factory=list)

    @classmethod
    def parse(cls, data: "Mapping[str, Any] | RawAsrResult") -> "RawAsrResult":
        """Parse either the Azure NBest shape or the flat camelCase shape."""
        if isinstance(data, RawAsrResult):
            return data
        if not isinstance(data, Mapping):
            logger.warning("Partial result is not an object (%s), using empty result", type(data).__name__)
            return cls()
        if "NBest" in data:
            return cls.from_azure_json(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawAsrResult":
        """Parse the flat shape.

        ``{text, accuracyScore, fluencyScore, completenessScore, pronScore,
        prosodyScore, words: [{word, accuracyScore, errorType, phonemes}]}``
        """
        text = str(data.get("text") or data.get("recognizedText") or "")
        raw_words = [
            (
                w.get("word") or w.get("text") or "",
                _score(w.get("accuracyScore"), "word accuracy"),
                w.get("errorType"),
                _phonemes(w.get("phonemes"), None),
            )
            for w in _list(data.get("words"), "words")
            if isinstance(w, Mapping)
        ]
        return cls._build(
            text,
            {
                "accuracy_score": _score(data.get("accuracyScore"), "accuracyScore"),
                "fluency_score": _score(data.get("fluencyScore"), "fluencyScore"),
                "completeness_score": _score(data.get("completenessScore"), "completenessScore"),
                "pron_score": _score(data.get("pronScore"), "pronScore"),
                "prosody_score": _score(data.get("prosodyScore"), "prosodyScore"),
            },
            raw_words,
        )

    @classmethod
    def from_azure_json(cls, data: Mapping[str, Any] | str) -> "RawAsrResult":
        """Parse an Azure Speech result with ``NBest[0].PronunciationAssessment``.

        Words are read from ``NBest[0].Words``; phonemes from each word's
        ``Phonemes`` or, when absent, from its ``Syllables``.
        """
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                logger.warning("Partial result is not valid JSON (%s), using empty result", e)
                return cls()
        data = _mapping(data, "partial result")

        candidates = _list(data.get("NBest"), "NBest")
        nbest = _mapping(candidates[0] if candidates else None, "NBest[0]")
        assessment = _mapping(nbest.get("PronunciationAssessment"), "PronunciationAssessment")
        if not assessment:
            logger.warning("Partial result has no PronunciationAssessment block")

        text = str(data.get("DisplayText") or nbest.get("Display") or data.get("Text") or "")
        raw_words = []
        for w in _list(nbest.get("Words") or assessment.get("Words"), "Words"):
            if not isinstance(w, Mapping):
                continue
            word_assessment = _mapping(w.get("PronunciationAssessment"), "word PronunciationAssessment")
            phonemes = _phonemes(w.get("Phonemes"), "PronunciationAssessment")
            if not phonemes:
                for syllable in _list(w.get("Syllables"), "Syllables"):
                    if isinstance(syllable, Mapping):
                        phonemes.extend(_phonemes(syllable.get("Phonemes"), "PhonemeAssessment"))
            raw_words.append(
                (
                    w.get("Word") or "",
                    _score(word_assessment.get("AccuracyScore", w.get("AccuracyScore")), "word accuracy"),
                    word_assessment.get("ErrorType", w.get("ErrorType")),
                    phonemes,
                )
            )

        return cls._build(
            text,
            {
                "accuracy_score": _score(assessment.get("AccuracyScore"), "AccuracyScore"),
                "fluency_score": _score(assessment.get("FluencyScore"), "FluencyScore"),
                "completeness_score": _score(assessment.get("CompletenessScore"), "CompletenessScore"),
                "pron_score": _score(assessment.get("PronScore"), "PronScore"),
                "prosody_score": _score(assessment.get("ProsodyScore"), "ProsodyScore"),
            },
            raw_words,
        )

    @classmethod
    def _build(
        cls,
        text: str,
        scores: dict[str, Optional[float]],
        raw_words: list[tuple[str, Optional[float], Any, list[PhonemeScore]]],
    ) -> "RawAsrResult":
        accuracy = scores["accuracy_score"]
        if accuracy is None:
            # Utterance accuracy absent: fall back to the mean word accuracy
            known = [a for w, a, _, _ in raw_words if isinstance(w, str) and w and a is not None]
            if known:
                accuracy = sum(known) / len(known)
            else:
                logger.warning("Partial result has no accuracy score, defaulting to 0")
                accuracy = 0.0

        words = [
            WordScore(
                text=str(word),
                accuracy_score=accuracy if score is None else score,
                error_type=_error_type(error_type),
                phonemes=phonemes,
            )
            for word, score, error_type, phonemes in raw_words
            if isinstance(word, str) and word
        ]
        if not words and text:
            # No word breakdown: every word of the text gets the utterance score
            words = [WordScore(text=token, accuracy_score=accuracy) for token in text.split()]

        for name in ("fluency_score", "completeness_score", "pron_score"):
            if scores[name] is None:
                logger.debug("Partial result missing %s, defaulting to 0", name)

        return cls(
            recognized_text=text,
            accuracy_score=accuracy,
            fluency_score=scores["fluency_score"] or 0.0,
            completeness_score=scores["completeness_score"] or 0.0,
            pron_score=scores["pron_score"] or 0.0,
            prosody_score=scores["prosody_score"],
            words=words,
        )


class ErrorStatistics(BaseModel):
    """Counts of word error types across the merged word list."""

    correct_words: int = 0
    mispronunciations: int = 0
    omissions: int = 0
    insertions: int = 0
    unexpected_breaks: int = 0
    total_words: int = 0

    @classmethod
    def from_words(cls, words: list[WordScore]) -> "ErrorStatistics":
        counts = {t: 0 for t in ERROR_TYPES}
        for word in words:
            counts[word.error_type] += 1
        return cls(
            correct_words=counts["None"],
            mispronunciations=counts["Mispronunciation"],
            omissions=counts["Omission"],
            insertions=counts["Insertion"],
            unexpected_breaks=counts["UnexpectedBreak"],
            total_words=len(words),
        )


class WordDiagnostic(BaseModel):
    """What went wrong with one word and how to practice it."""

    word: str
    error_type: ErrorType = "None"
    problematic_phonemes: list[str] = Field(default_factory=list)
    category: ErrorCategory = "consonant"
    severity: Severity = "low"
    hint: str = ""
    practice: str = ""


class AssessmentResult(BaseModel):
    """Merged assessment of one utterance across all partial results."""

    accuracy_score: float
    fluency_score: float
    completeness_score: float
    pron_score: float
    prosody_score: Optional[float] = None
    words: list[WordScore] = Field(default_factory=list)
    error_statistics: ErrorStatistics = Field(default_factory=ErrorStatistics)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    problem_words: list[str] = Field(default_factory=list)
    word_diagnostics: list[WordDiagnostic] = Field(default_factory=list)
    partial_count: int = 0

    @property
    def average_score(self) -> float:
        """Mean of the utterance scores, including prosody when scored."""
        scores = [self.accuracy_score, self.fluency_score, self.completeness_score]
        if self.prosody_score is not None:
            scores.append(self.prosody_score)
        return sum(scores) / len(scores)

    @property
    def overall_score(self) -> float:
        """Pronunciation score when the service sent one, else the average."""
        return self.pron_score if self.pron_score > 0 else self.average_score

    @classmethod
    def from_json_file(cls, path: Path) -> "AssessmentResult":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)
