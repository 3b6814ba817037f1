"""Message analysis schema and its fallback value."""

from pydantic import BaseModel, ConfigDict, Field


class EmotionScore(BaseModel):
    """One detected emotion with its strength."""

    model_config = ConfigDict(frozen=True)

    label: str
    score: float = Field(ge=0.0, le=1.0)


class MessageAnalysis(BaseModel):
    """Structured classification of a single user message.

    Every field has a neutral default, so ``MessageAnalysis()`` is the value
    used whenever analysis is unavailable.
    """

    model_config = ConfigDict(frozen=True)

    mood: str = "neutral"
    tone: str = "neutral"
    intent: str = "unknown"
    sentiment_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    sentiment_label: str = "neutral"
    formality_score: float = Field(default=0.5, ge=0.0, le=1.0)
    urgency_score: float = Field(default=0.0, ge=0.0, le=1.0)
    politeness_score: float = Field(default=0.5, ge=0.0, le=1.0)
    topic_keywords: list[str] = Field(default_factory=list)
    domain_context: str = "general"
    detected_language: str = "en"
    emotions: list[EmotionScore] = Field(default_factory=list)
    dominant_emotion: str = "neutral"
    overall_emotional_intensity: float = Field(default=0.0, ge=0.0, le=1.0)

    # Geospatial intents only
    location_query: str | None = None
    place_category: str | None = None
    destination: str | None = None
    travel_mode: str | None = None

    # Translation and summarization intents only
    source_text: str | None = None
    target_language: str | None = None


DEFAULT_ANALYSIS = MessageAnalysis()
