"""Tone classification module."""

from .classifier import ToneClassifier, classify_tones, split_contour, tone_accuracy, tone_summary
from .templates import TEMPLATE_SHAPES, match_templates, normalize_curve, template_similarity

__all__ = [
    "ToneClassifier",
    "classify_tones",
    "split_contour",
    "tone_accuracy",
    "tone_summary",
    "TEMPLATE_SHAPES",
    "match_templates",
    "normalize_curve",
    "template_similarity",
]
