"""Unit tests for message analysis."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from quirra.schemas.analysis_schema import DEFAULT_ANALYSIS, MessageAnalysis
from quirra.services.analysis_service import (
    ANALYSIS_SYSTEM_PROMPT,
    EMOTION_SCORE_FLOOR,
    GEOSPATIAL_FIELDS,
    AnalysisFailure,
    MessageAnalyzer,
    analyze_message,
    build_analysis_prompt,
    coerce_emotions,
    normalize_analysis,
    parse_analysis_payload,
)
from tests.conftest import make_analysis_llm, make_llm_config, make_mock_llm

EXAMPLE_MESSAGE = (
    "I'm so excited about my new project, any recommendations for version control?"
)
EXAMPLE_PAYLOAD = {
    "intent": "recommendation",
    "emotions": [
        {"label": "excitement", "score": 0.8},
        {"label": "neutral", "score": 0.05},
    ],
}


class TestExampleScenario:
    """The recommendation message with a two-emotion provider answer."""

    async def test_low_scores_dropped_and_dominant_derived(self) -> None:
        llm = make_analysis_llm(EXAMPLE_PAYLOAD)

        analysis = await analyze_message(EXAMPLE_MESSAGE, make_llm_config(), llm)

        assert [e.model_dump() for e in analysis.emotions] == [
            {"label": "excitement", "score": 0.8}
        ]
        assert analysis.dominant_emotion == "excitement"
        assert analysis.overall_emotional_intensity == 0.8
        assert analysis.intent == "recommendation"
        for field in GEOSPATIAL_FIELDS:
            assert getattr(analysis, field) is None

    async def test_missing_fields_filled_from_default(self) -> None:
        llm = make_analysis_llm(EXAMPLE_PAYLOAD)

        analysis = await analyze_message(EXAMPLE_MESSAGE, make_llm_config(), llm)

        assert analysis.mood == DEFAULT_ANALYSIS.mood
        assert analysis.sentiment_label == "neutral"
        assert analysis.formality_score == DEFAULT_ANALYSIS.formality_score
        assert analysis.detected_language == "en"


class TestMissingApiKey:
    """Without a key no call is made and the default is returned."""

    async def test_returns_default_without_calling(self, mock_llm: MagicMock) -> None:
        config = make_llm_config(api_key="")

        first = await analyze_message("hello", config, mock_llm)
        second = await analyze_message("something else entirely", config, mock_llm)

        assert first == DEFAULT_ANALYSIS
        assert second == DEFAULT_ANALYSIS
        mock_llm.ainvoke.assert_not_called()

    async def test_result_reports_reason(self, mock_llm: MagicMock) -> None:
        result = await MessageAnalyzer(make_llm_config(api_key=""), mock_llm).analyze(
            "hello"
        )

        assert result.ok is False
        assert result.failure is AnalysisFailure.MISSING_API_KEY
        assert result.or_default() == MessageAnalysis()


class TestProviderFailures:
    """Provider failures degrade to the default object."""

    @pytest.mark.parametrize(
        "content",
        ["not json at all", "[1, 2, 3]", '"just a string"', "{broken", ""],
    )
    async def test_unparseable_output_gives_default(self, content: str) -> None:
        llm = make_mock_llm(content)

        result = await MessageAnalyzer(make_llm_config(), llm).analyze("hi")

        assert result.failure is AnalysisFailure.INVALID_JSON
        assert result.or_default() == DEFAULT_ANALYSIS

    async def test_timeout(self) -> None:
        llm = MagicMock(spec=BaseChatModel)
        llm.ainvoke = AsyncMock(side_effect=asyncio.TimeoutError())

        result = await MessageAnalyzer(make_llm_config(), llm).analyze("hi")

        assert result.failure is AnalysisFailure.TIMEOUT

    async def test_slow_provider_is_cut_off(self) -> None:
        async def slow(*args: object, **kwargs: object) -> AIMessage:
            await asyncio.sleep(1)
            return AIMessage(content="{}")

        llm = MagicMock(spec=BaseChatModel)
        llm.ainvoke = slow

        result = await MessageAnalyzer(
            make_llm_config(timeout_seconds=0.01), llm
        ).analyze("hi")

        assert result.failure is AnalysisFailure.TIMEOUT

    async def test_network_error(self) -> None:
        llm = MagicMock(spec=BaseChatModel)
        llm.ainvoke = AsyncMock(
            side_effect=openai.APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat")
            )
        )

        result = await MessageAnalyzer(make_llm_config(), llm).analyze("hi")

        assert result.failure is AnalysisFailure.PROVIDER_ERROR

    async def test_unexpected_error_is_absorbed(self) -> None:
        llm = MagicMock(spec=BaseChatModel)
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("boom"))

        analysis = await analyze_message("hi", make_llm_config(), llm)

        assert analysis == DEFAULT_ANALYSIS


class TestPrompt:
    def test_prompt_shape(self) -> None:
        messages = build_analysis_prompt("Where is the nearest cafe?")

        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert '"""Where is the nearest cafe?"""' in messages[1].content

    def test_system_prompt_enumerates_vocabularies(self) -> None:
        assert "frustration" in ANALYSIS_SYSTEM_PROMPT
        assert "local_recommendation" in ANALYSIS_SYSTEM_PROMPT
        assert "technical_support" in ANALYSIS_SYSTEM_PROMPT
        assert '"overall_emotional_intensity"' in ANALYSIS_SYSTEM_PROMPT


class TestParsePayload:
    def test_plain_object(self) -> None:
        assert parse_analysis_payload('{"intent": "greeting"}') == {"intent": "greeting"}

    def test_code_fence_stripped(self) -> None:
        text = '```json\n{"intent": "greeting"}\n```'
        assert parse_analysis_payload(text) == {"intent": "greeting"}

    def test_non_object_rejected(self) -> None:
        assert parse_analysis_payload("[]") is None


class TestCoerceEmotions:
    def test_mapping_input(self) -> None:
        emotions = coerce_emotions({"joy": 0.6, "fear": 0.1, "anger": 0.3})

        assert [(e.label, e.score) for e in emotions] == [("joy", 0.6), ("anger", 0.3)]

    def test_malformed_entries_dropped(self) -> None:
        emotions = coerce_emotions(
            [
                {"label": "joy", "score": "high"},
                {"score": 0.9},
                "sadness",
                {"label": "hope", "score": 0.4},
                {"label": "pride", "score": True},
            ]
        )

        assert [e.label for e in emotions] == ["hope"]

    def test_scores_above_one_capped(self) -> None:
        assert coerce_emotions([{"label": "joy", "score": 3}])[0].score == 1.0

    def test_non_collection_gives_empty(self) -> None:
        assert coerce_emotions("joy") == []
        assert coerce_emotions(None) == []

    @pytest.mark.parametrize("score", [-0.5, 0.0, 0.05, EMOTION_SCORE_FLOOR])
    def test_floor_is_exclusive(self, score: float) -> None:
        assert coerce_emotions([{"label": "joy", "score": score}]) == []


class TestNormalizeAnalysis:
    def test_emotions_never_at_or_below_floor(self) -> None:
        analysis = normalize_analysis(
            {
                "emotions": [
                    {"label": "joy", "score": 0.1},
                    {"label": "relief", "score": 0.11},
                    {"label": "fear", "score": 0.0},
                ]
            }
        )

        assert all(e.score > EMOTION_SCORE_FLOOR for e in analysis.emotions)
        assert [e.label for e in analysis.emotions] == ["relief"]

    def test_dominant_is_max_score_entry(self) -> None:
        analysis = normalize_analysis(
            {
                "emotions": [
                    {"label": "curiosity", "score": 0.4},
                    {"label": "anxiety", "score": 0.7},
                    {"label": "hope", "score": 0.2},
                ]
            }
        )

        assert analysis.dominant_emotion == "anxiety"
        assert analysis.overall_emotional_intensity == 0.7

    def test_model_supplied_dominant_wins(self) -> None:
        analysis = normalize_analysis(
            {
                "emotions": [{"label": "anxiety", "score": 0.7}],
                "dominant_emotion": "stress",
                "overall_emotional_intensity": 0.9,
            }
        )

        assert analysis.dominant_emotion == "stress"
        assert analysis.overall_emotional_intensity == 0.9

    def test_no_emotions_keeps_defaults(self) -> None:
        analysis = normalize_analysis({"emotions": []})

        assert analysis.dominant_emotion == "neutral"
        assert analysis.overall_emotional_intensity == 0.0

    def test_scores_clamped(self) -> None:
        analysis = normalize_analysis(
            {
                "sentiment_score": -4,
                "formality_score": 2.5,
                "urgency_score": -1,
                "politeness_score": "very",
                "overall_emotional_intensity": 7,
            }
        )

        assert analysis.sentiment_score == -1.0
        assert analysis.formality_score == 1.0
        assert analysis.urgency_score == 0.0
        assert analysis.politeness_score == 0.5
        assert analysis.overall_emotional_intensity == 1.0

    @pytest.mark.parametrize(
        ("label", "expected"),
        [("Positive", "positive"), ("mixed", "mixed"), ("ecstatic", "neutral"), (None, "neutral")],
    )
    def test_sentiment_label_restricted(self, label: str | None, expected: str) -> None:
        assert normalize_analysis({"sentiment_label": label}).sentiment_label == expected

    @pytest.mark.parametrize(
        "intent", ["question", "recommendation", "translation", "greeting", "unknown"]
    )
    def test_geospatial_fields_null_outside_geospatial_intents(self, intent: str) -> None:
        analysis = normalize_analysis(
            {
                "intent": intent,
                "location_query": "cafes",
                "place_category": "cafe",
                "destination": "Lagos",
                "travel_mode": "walking",
            }
        )

        for field in GEOSPATIAL_FIELDS:
            assert getattr(analysis, field) is None

    def test_geospatial_fields_kept_for_geospatial_intent(self) -> None:
        analysis = normalize_analysis(
            {
                "intent": "Directions",
                "destination": "Central Station",
                "travel_mode": "transit",
            }
        )

        assert analysis.intent == "directions"
        assert analysis.destination == "Central Station"
        assert analysis.travel_mode == "transit"
        assert analysis.location_query is None

    def test_translation_fields(self) -> None:
        translation = normalize_analysis(
            {"intent": "translation", "source_text": "bonjour", "target_language": "en"}
        )
        summary = normalize_analysis(
            {"intent": "summarization", "source_text": "long text", "target_language": "fr"}
        )
        question = normalize_analysis(
            {"intent": "question", "source_text": "x", "target_language": "de"}
        )

        assert (translation.source_text, translation.target_language) == ("bonjour", "en")
        assert (summary.source_text, summary.target_language) == ("long text", None)
        assert (question.source_text, question.target_language) == (None, None)

    def test_full_payload_round_trips_through_model(self) -> None:
        payload = {
            "mood": "upbeat",
            "tone": "friendly",
            "intent": "question",
            "sentiment_score": 0.6,
            "sentiment_label": "positive",
            "topic_keywords": ["git", " branching ", ""],
            "domain_context": "technical_support",
            "detected_language": "en",
        }

        analysis = normalize_analysis(json.loads(json.dumps(payload)))

        assert analysis.mood == "upbeat"
        assert analysis.topic_keywords == ["git", "branching"]
        assert analysis.domain_context == "technical_support"
