"""Longitudinal learning analytics over an append-only session log.

The engine is a plain object owned by the caller. It holds the session
log and the profile derived from it; persistence happens explicitly
through ``SessionStore`` at the boundary. Concurrent ``add_session``
calls must be serialized by the caller.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Iterable, Sequence, cast

import numpy as np

from ..config import AnalyticsConfig
from .models import CATEGORIES, Advice, Category, LearningProfile, LearningSession, LearningStyle, WeakArea

logger = logging.getLogger(__name__)

WEAK_AREA_ADVICE: dict[Category, str] = {
    "accuracy": "Pronunciation accuracy is your weakest area. Slow down and shadow word by word.",
    "fluency": "Fluency needs work. Shadow full phrases at natural speed without stopping.",
    "completeness": "Parts of sentences are being dropped. Shadow the whole sentence every time.",
}

STYLE_ADVICE: dict[LearningStyle, str] = {
    "visual": "Accuracy leads fluency. Practice with audio only to build speed and rhythm.",
    "auditory": "Fluency leads accuracy. Read along with pinyin and tone marks while shadowing.",
    "balanced": "Accuracy and fluency are balanced. Mix listening drills with reading along.",
}


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return float(np.mean(values)) if values else 0.0


def streak_days(sessions: Sequence[LearningSession], today: date | None = None) -> int:
    """Consecutive days with at least one session, ending today."""
    days = {s.timestamp.date() for s in sessions}
    current = today or date.today()
    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def improvement_percent(scores: Sequence[float]) -> float:
    """Percent change of the recent half's mean over the older half's.

    ``scores`` are oldest first. The recent half takes the extra element
    when the count is odd.
    """
    if len(scores) < 2:
        return 0.0
    split = len(scores) // 2
    older, recent = scores[:split], scores[split:]
    older_avg = _mean(older)
    if older_avg == 0:
        return 0.0
    return (_mean(recent) - older_avg) / older_avg * 100.0


def learning_style(session: LearningSession, margin: float = 5.0) -> LearningStyle:
    """Visual when accuracy exceeds fluency by margin, auditory when the reverse."""
    diff = session.scores.accuracy - session.scores.fluency
    if diff >= margin:
        return "visual"
    if -diff >= margin:
        return "auditory"
    return "balanced"


def build_profile(
    sessions: Sequence[LearningSession],
    config: AnalyticsConfig | None = None,
    today: date | None = None,
) -> LearningProfile | None:
    """Derive a LearningProfile from a session log (oldest first).

    Returns None for an empty log.
    """
    cfg = config or AnalyticsConfig()
    if not sessions:
        return None

    window = sessions[-cfg.average_window :]
    recent = sessions[-cfg.weak_window :]
    previous = sessions[-2 * cfg.weak_window : -cfg.weak_window]

    averages = {c: _mean(s.score(c) for s in window) for c in CATEGORIES}
    averages["overall"] = _mean(s.scores.overall for s in window)

    trends: dict[str, float] = {}
    weak_areas: list[WeakArea] = []
    for category in CATEGORIES:
        recent_avg = _mean(s.score(category) for s in recent)
        trends[category] = recent_avg - _mean(s.score(category) for s in previous) if previous else 0.0
        if recent_avg < cfg.weak_threshold:
            weak_areas.append(
                WeakArea(
                    category=category,
                    average=recent_avg,
                    severity=min(1.0, (cfg.weak_threshold - recent_avg) / cfg.weak_threshold),
                    trend=trends[category],
                )
            )

    latest = sessions[-1]
    strengths = [c for c in CATEGORIES if latest.score(c) >= cfg.strength_threshold]

    with_emotion = [s.emotional_state.confidence for s in sessions if s.emotional_state is not None]
    with_tones = [s.tone_accuracy for s in sessions if s.tone_accuracy is not None]

    return LearningProfile(
        session_count=len(sessions),
        average_scores=averages,
        trends=trends,
        weak_areas=weak_areas,
        strengths=strengths,
        learning_style=learning_style(latest, cfg.style_margin),
        total_study_time_sec=sum(s.duration_sec for s in sessions),
        streak_days=streak_days(sessions, today),
        improvement_percent=improvement_percent([s.scores.overall for s in sessions]),
        average_confidence=_mean(with_emotion) if with_emotion else None,
        average_tone_accuracy=_mean(with_tones) if with_tones else None,
    )


def advise(profile: LearningProfile | None) -> list[Advice]:
    """Advice for a profile, sorted by descending priority."""
    if profile is None:
        return []

    advice = [
        Advice(
            category=area.category,
            message=WEAK_AREA_ADVICE[area.category]
            + (f" Recent trend: {area.trend:+.1f} points." if area.trend else ""),
            priority=area.severity * 10,
        )
        for area in profile.weak_areas
    ]

    if profile.streak_days >= 7:
        advice.append(
            Advice(
                category="motivation",
                message=f"{profile.streak_days}-day practice streak. Consistency is what builds skill.",
                priority=5,
            )
        )
    if not profile.weak_areas and profile.strengths:
        advice.append(
            Advice(
                category="motivation",
                message=f"Strong results in {', '.join(profile.strengths)}. Try longer or faster passages.",
                priority=5,
            )
        )
    if profile.improvement_percent > 0:
        advice.append(
            Advice(
                category="motivation",
                message=f"Scores are up {profile.improvement_percent:.0f}% on your earlier sessions.",
                priority=4,
            )
        )
    if profile.average_confidence is not None:
        if profile.average_confidence > 70:
            message = "You sound confident. Average confidence is above 70%."
        else:
            message = "Confidence is still building. Speak up and keep a steady pace."
        advice.append(Advice(category="confidence", message=message, priority=4))

    advice.append(Advice(category="style", message=STYLE_ADVICE[profile.learning_style], priority=3))

    return sorted(advice, key=lambda a: a.priority, reverse=True)


class LearningAnalyticsEngine:
    """Owns a session log and the profile derived from it.

    Usage:
        engine = LearningAnalyticsEngine(SessionStore(path).load())
        engine.add_session(session)
        for item in engine.generate_advice()[:3]:
            print(item.message)
    """

    def __init__(
        self,
        sessions: Iterable[LearningSession] | None = None,
        config: AnalyticsConfig | None = None,
        clock: Callable[[], date] = date.today,
    ):
        self.config = config or AnalyticsConfig()
        self.clock = clock
        self._sessions: list[LearningSession] = sorted(sessions or [], key=lambda s: s.timestamp)
        self._profile = self._recompute()

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def sessions(self) -> tuple[LearningSession, ...]:
        """The session log, oldest first (read-only view)."""
        return tuple(self._sessions)

    def add_session(self, session: LearningSession) -> LearningProfile:
        """Append a session and recompute the profile."""
        self._sessions.append(session)
        # A non-empty log always yields a profile
        profile = cast(LearningProfile, self._recompute())
        self._profile = profile
        logger.debug(
            "Added session %s (%d total), weak areas: %s",
            session.id,
            len(self._sessions),
            [a.category for a in profile.weak_areas],
        )
        return profile

    def get_profile(self) -> LearningProfile | None:
        return self._profile

    def generate_advice(self, limit: int | None = None) -> list[Advice]:
        """Advice sorted by descending priority, optionally truncated."""
        advice = advise(self._profile)
        return advice if limit is None else advice[: max(0, limit)]

    def _recompute(self) -> LearningProfile | None:
        return build_profile(self._sessions, self.config, self.clock())
