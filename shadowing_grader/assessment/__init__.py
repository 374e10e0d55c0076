"""Pronunciation assessment aggregation module."""

from .aggregator import AssessmentAggregator, aggregate, tokenize, word_matches
from .diagnostics import diagnose_word, score_grade, score_tier_advice
from .models import (
    AssessmentResult,
    ErrorStatistics,
    PhonemeScore,
    RawAsrResult,
    WordDiagnostic,
    WordScore,
)

__all__ = [
    "AssessmentAggregator",
    "aggregate",
    "tokenize",
    "word_matches",
    "diagnose_word",
    "score_grade",
    "score_tier_advice",
    "AssessmentResult",
    "ErrorStatistics",
    "PhonemeScore",
    "RawAsrResult",
    "WordDiagnostic",
    "WordScore",
]
