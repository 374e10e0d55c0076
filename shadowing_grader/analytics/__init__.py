"""Learning analytics module."""

from .engine import (
    LearningAnalyticsEngine,
    advise,
    build_profile,
    improvement_percent,
    learning_style,
    streak_days,
)
from .models import Advice, LearningProfile, LearningSession, SessionScores, WeakArea
from .store import SessionLog, SessionStore

__all__ = [
    "LearningAnalyticsEngine",
    "advise",
    "build_profile",
    "improvement_percent",
    "learning_style",
    "streak_days",
    "Advice",
    "LearningProfile",
    "LearningSession",
    "SessionScores",
    "WeakArea",
    "SessionLog",
    "SessionStore",
]
