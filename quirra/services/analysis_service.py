"""Message analysis: one JSON-mode model call turned into a MessageAnalysis."""

import json
import math
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from quirra.core.exceptions import ProviderTimeoutError
from quirra.core.llm import (
    build_chat_model,
    invoke_with_timeout,
    map_provider_error,
    response_text,
)
from quirra.core.settings import LLMConfig
from quirra.schemas.analysis_schema import EmotionScore, MessageAnalysis

logger = structlog.get_logger()

EMOTIONS = (
    "joy", "excitement", "gratitude", "love", "pride", "relief", "hope",
    "curiosity", "surprise", "neutral", "confusion", "boredom", "sadness",
    "loneliness", "disappointment", "frustration", "anger", "fear", "anxiety",
    "stress", "embarrassment", "guilt",
)  # fmt: skip

INTENTS = (
    "question", "complaint", "feedback", "casual_talk", "instruction", "request",
    "information_seeking", "problem_reporting", "greeting", "clarification",
    "recommendation", "translation", "summarization", "location_search",
    "directions", "nearby_search", "local_recommendation",
)  # fmt: skip

DOMAIN_CONTEXTS = (
    "education", "technical_support", "customer_service", "personal", "business",
    "creative", "legal", "medical", "travel", "wellbeing", "general",
)  # fmt: skip

SENTIMENT_LABELS = frozenset({"positive", "negative", "neutral", "mixed"})

GEOSPATIAL_INTENTS = frozenset(
    {"location_search", "directions", "nearby_search", "local_recommendation"}
)
GEOSPATIAL_FIELDS = ("location_query", "place_category", "destination", "travel_mode")

SOURCE_TEXT_INTENTS = frozenset({"translation", "summarization"})
TARGET_LANGUAGE_INTENTS = frozenset({"translation"})

# Emotions at or below this score are noise.
EMOTION_SCORE_FLOOR = 0.1

_TEXT_FIELDS = ("mood", "tone", "domain_context", "detected_language")
_UNIT_SCORE_FIELDS = ("formality_score", "urgency_score", "politeness_score")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

ANALYSIS_SYSTEM_PROMPT = f"""You are an expert communication analyst. Analyze the user's message and reply with a single JSON object and nothing else.

Allowed values:
- emotions labels: {', '.join(EMOTIONS)}
- intent: {', '.join(INTENTS)}
- domain_context: {', '.join(DOMAIN_CONTEXTS)}
- sentiment_label: {', '.join(sorted(SENTIMENT_LABELS))}

JSON schema:
{{
  "mood": string,
  "tone": string,
  "intent": string,
  "sentiment_score": number between -1.0 and 1.0,
  "sentiment_label": string,
  "formality_score": number between 0.0 and 1.0,
  "urgency_score": number between 0.0 and 1.0,
  "politeness_score": number between 0.0 and 1.0,
  "topic_keywords": array of 3 to 5 strings,
  "domain_context": string,
  "detected_language": ISO 639-1 code,
  "emotions": array of {{"label": string, "score": number between 0.0 and 1.0}},
  "dominant_emotion": string,
  "overall_emotional_intensity": number between 0.0 and 1.0,
  "location_query": string or null,
  "place_category": string or null,
  "destination": string or null,
  "travel_mode": string or null,
  "source_text": string or null,
  "target_language": ISO 639-1 code or null
}}

Fill location_query, place_category, destination and travel_mode only for the intents {', '.join(sorted(GEOSPATIAL_INTENTS))}.
Fill source_text only when the intent is translation or summarization, and target_language only for translation."""


class AnalysisFailure(StrEnum):
    """Why an analysis produced no result."""

    MISSING_API_KEY = "missing_api_key"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    INVALID_JSON = "invalid_json"


@dataclass(frozen=True)
class AnalysisResult:
    """Either an analysis or the reason there is none."""

    analysis: MessageAnalysis | None = None
    failure: AnalysisFailure | None = None

    @property
    def ok(self) -> bool:
        return self.analysis is not None

    def or_default(self) -> MessageAnalysis:
        """The analysis, or the neutral default when it failed."""
        return self.analysis if self.analysis is not None else MessageAnalysis()


def build_analysis_prompt(message: str) -> list[BaseMessage]:
    return [
        SystemMessage(content=ANALYSIS_SYSTEM_PROMPT),
        HumanMessage(content=f'Analyze the following message:\n\n"""{message}"""'),
    ]


def parse_analysis_payload(text: str) -> dict[str, Any] | None:
    """Decode the model output, tolerating a markdown code fence around it."""
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        payload = json.loads(cleaned)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    number = _number(value)
    if number is None:
        return default
    return min(max(number, low), high)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def coerce_emotions(raw: Any) -> list[EmotionScore]:
    """Normalize model emotions to ``{label, score}`` entries above the floor.

    Accepts a list of objects or a ``label -> score`` mapping; malformed
    entries are dropped and input order is kept.
    """
    if isinstance(raw, dict):
        pairs = list(raw.items())
    elif isinstance(raw, list):
        pairs = [
            (entry.get("label"), entry.get("score"))
            for entry in raw
            if isinstance(entry, dict)
        ]
    else:
        return []

    emotions: list[EmotionScore] = []
    for label, score in pairs:
        label = _text(label)
        number = _number(score)
        if label is None or number is None or number <= EMOTION_SCORE_FLOOR:
            continue
        emotions.append(EmotionScore(label=label, score=min(number, 1.0)))
    return emotions


def normalize_analysis(raw: dict[str, Any]) -> MessageAnalysis:
    """Merge a decoded model payload over the defaults and enforce field rules.

    A dominant emotion or intensity supplied by the model wins. Otherwise
    both come from the top-scoring emotion that survived filtering.
    """
    fields = MessageAnalysis().model_dump()

    for name in _TEXT_FIELDS:
        value = _text(raw.get(name))
        if value is not None:
            fields[name] = value

    intent = _text(raw.get("intent"))
    if intent is not None:
        fields["intent"] = intent.lower()

    label = _text(raw.get("sentiment_label"))
    fields["sentiment_label"] = (
        label.lower() if label and label.lower() in SENTIMENT_LABELS else "neutral"
    )
    fields["sentiment_score"] = _clamp(
        raw.get("sentiment_score"), -1.0, 1.0, fields["sentiment_score"]
    )
    for name in _UNIT_SCORE_FIELDS:
        fields[name] = _clamp(raw.get(name), 0.0, 1.0, fields[name])

    keywords = raw.get("topic_keywords")
    if isinstance(keywords, list):
        fields["topic_keywords"] = [k.strip() for k in keywords if _text(k)]

    emotions = coerce_emotions(raw.get("emotions"))
    fields["emotions"] = [emotion.model_dump() for emotion in emotions]
    top = max(emotions, key=lambda e: e.score) if emotions else None

    dominant = _text(raw.get("dominant_emotion"))
    if dominant is not None:
        fields["dominant_emotion"] = dominant
    elif top is not None:
        fields["dominant_emotion"] = top.label

    intensity = _number(raw.get("overall_emotional_intensity"))
    if intensity is not None:
        fields["overall_emotional_intensity"] = min(max(intensity, 0.0), 1.0)
    elif top is not None:
        fields["overall_emotional_intensity"] = top.score

    geospatial = fields["intent"] in GEOSPATIAL_INTENTS
    for name in GEOSPATIAL_FIELDS:
        fields[name] = _text(raw.get(name)) if geospatial else None

    fields["source_text"] = (
        _text(raw.get("source_text"))
        if fields["intent"] in SOURCE_TEXT_INTENTS
        else None
    )
    fields["target_language"] = (
        _text(raw.get("target_language"))
        if fields["intent"] in TARGET_LANGUAGE_INTENTS
        else None
    )

    return MessageAnalysis.model_validate(fields)


class MessageAnalyzer:
    """Classifies user messages with a single best-effort model call."""

    def __init__(self, config: LLMConfig, llm: BaseChatModel | None = None) -> None:
        self._config = config
        self._llm = llm

    async def analyze(self, message: str) -> AnalysisResult:
        """Analyze one message. Failures are reported, never raised."""
        if not self._config.is_configured:
            logger.warning("Analysis skipped, no API key configured")
            return AnalysisResult(failure=AnalysisFailure.MISSING_API_KEY)

        llm = self._llm or build_chat_model(self._config, json_mode=True)
        try:
            response = await invoke_with_timeout(
                llm, build_analysis_prompt(message), self._config.timeout_seconds
            )
        except Exception as exc:
            mapped = map_provider_error(exc, "Analysis")
            failure = (
                AnalysisFailure.TIMEOUT
                if isinstance(mapped, ProviderTimeoutError)
                else AnalysisFailure.PROVIDER_ERROR
            )
            logger.warning(
                "Message analysis failed",
                reason=failure.value,
                error=str(exc) or type(exc).__name__,
            )
            return AnalysisResult(failure=failure)

        payload = parse_analysis_payload(response_text(response))
        if payload is None:
            logger.warning("Message analysis returned invalid JSON")
            return AnalysisResult(failure=AnalysisFailure.INVALID_JSON)

        return AnalysisResult(analysis=normalize_analysis(payload))


async def analyze_message(
    message: str,
    config: LLMConfig,
    llm: BaseChatModel | None = None,
) -> MessageAnalysis:
    """Analyze a message, falling back to the neutral default on any failure."""
    result = await MessageAnalyzer(config, llm).analyze(message)
    return result.or_default()
