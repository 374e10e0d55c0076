"""Learning session and profile models."""

from datetime import datetime
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from ..types import EmotionalState, clamp

Category = Literal["accuracy", "fluency", "completeness"]
CATEGORIES: tuple[Category, ...] = ("accuracy", "fluency", "completeness")

LearningStyle = Literal["visual", "auditory", "balanced"]


class SessionScores(BaseModel):
    """Scores of one completed exercise (0-100)."""

    accuracy: float = 0.0
    fluency: float = 0.0
    completeness: float = 0.0
    overall: float = 0.0

    model_config = {"frozen": True}

    @field_validator("accuracy", "fluency", "completeness", "overall")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp(v)


class LearningSession(BaseModel):
    """One completed utterance or exercise. Never mutated after creation."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=datetime.now)
    duration_sec: float = 0.0
    scores: SessionScores = Field(default_factory=SessionScores)
    mistakes: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()
    emotional_state: Optional[EmotionalState] = None
    tone_accuracy: Optional[float] = None

    model_config = {"frozen": True}

    def score(self, category: Category) -> float:
        return getattr(self.scores, category)


class WeakArea(BaseModel):
    """A category whose recent average is below the weak threshold."""

    category: Category
    average: float
    severity: float = Field(ge=0.0, le=1.0)
    trend: float = 0.0


class LearningProfile(BaseModel):
    """Learner profile derived from the session log."""

    session_count: int
    average_scores: dict[str, float]
    trends: dict[str, float] = Field(default_factory=dict)
    weak_areas: list[WeakArea] = Field(default_factory=list)
    strengths: list[Category] = Field(default_factory=list)
    learning_style: LearningStyle = "balanced"
    total_study_time_sec: float = 0.0
    streak_days: int = 0
    improvement_percent: float = 0.0
    average_confidence: Optional[float] = None
    average_tone_accuracy: Optional[float] = None

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class Advice(BaseModel):
    """One piece of advice; higher priority is shown first."""

    category: str
    message: str
    priority: float
