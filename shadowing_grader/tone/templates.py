"""Canonical tone shapes and template similarity."""

from typing import Callable, Dict

import numpy as np
from numpy.typing import NDArray

# Idealized contours on a normalized [0, 1] pitch scale, as functions of
# normalized time t in [0, 1].
TEMPLATE_SHAPES: Dict[int, Callable[[NDArray[np.floating]], NDArray[np.floating]]] = {
    # Tone 1: High level (55 in Chao notation)
    1: lambda t: np.full_like(t, 0.8),
    # Tone 2: Rising (35)
    2: lambda t: t,
    # Tone 3: Dipping (214), bottom at 40% of the syllable
    3: lambda t: np.where(t < 0.4, 0.4 - t, (t - 0.4) / 0.6),
    # Tone 4: Falling (51)
    4: lambda t: 1.0 - t,
}


def render_template(tone: int, length: int) -> NDArray[np.floating]:
    """Sample a tone template at `length` evenly spaced points."""
    if length <= 0:
        return np.zeros(0, dtype=np.float64)
    t = np.linspace(0.0, 1.0, length) if length > 1 else np.array([0.5])
    return TEMPLATE_SHAPES[tone](t).astype(np.float64)


def normalize_curve(f0: NDArray[np.floating]) -> NDArray[np.floating]:
    """Min/max normalize a voiced pitch curve to [0, 1].

    A constant curve maps to 0.5 everywhere.
    """
    f0 = np.asarray(f0, dtype=np.float64)
    if len(f0) == 0:
        return f0
    low, high = float(np.min(f0)), float(np.max(f0))
    if high - low < 1e-9:
        return np.full_like(f0, 0.5)
    return (f0 - low) / (high - low)


def template_similarity(curve: NDArray[np.floating], tone: int) -> float:
    """One minus mean absolute difference to the tone template (0..1)."""
    if len(curve) == 0:
        return 0.0
    template = render_template(tone, len(curve))
    return float(np.clip(1.0 - np.mean(np.abs(curve - template)), 0.0, 1.0))


def match_templates(curve: NDArray[np.floating]) -> tuple[int, float, dict[int, float]]:
    """Find the best-matching tone template.

    Args:
        curve: Normalized pitch curve (0..1).

    Returns:
        Tuple of (best_tone, best_similarity, similarities_by_tone).
        Ties resolve to the lower tone number.
    """
    similarities = {tone: template_similarity(curve, tone) for tone in sorted(TEMPLATE_SHAPES)}
    best = max(similarities, key=similarities.get)  # type: ignore
    return best, similarities[best], similarities
