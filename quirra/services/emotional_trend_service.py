"""Weekly emotional trend note kept in long-term memory."""

import datetime as dt
from collections.abc import Sequence

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from quirra.core.llm import (
    build_chat_model,
    invoke_with_timeout,
    map_provider_error,
    response_text,
)
from quirra.core.settings import LLMConfig
from quirra.models.chat_message import ChatMessage
from quirra.models.wellbeing import MoodLog
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.memory_repo import MemoryRepository
from quirra.repositories.wellbeing_repo import WellbeingRepository

logger = structlog.get_logger()

EMOTIONAL_TREND_KEY = "emotional_trend_summary"
EMOTIONAL_TREND_ROLE = "emotional_trend"
TREND_WINDOW_DAYS = 7
TREND_MESSAGE_LIMIT = 20
SNIPPET_LENGTH = 100

STABLE_BASELINE_SUMMARY = (
    "User's recent emotional state appears stable and generally positive, "
    "indicating a good baseline for continued supportive interaction."
)

TREND_SYSTEM_PROMPT = (
    "You are an expert in human psychology and emotional intelligence. Analyze "
    "the provided emotional data (mood logs and message emotional context) for "
    "a user over the past week. Identify key emotional trends, recurring "
    "emotional states, significant shifts in mood or intensity, and likely "
    "reasons suggested by the message snippets. Write a concise, empathetic "
    "summary of 1-3 sentences phrased as an internal note for Quirra, the AI "
    "assistant, covering both the user's emotional state and how Quirra should "
    "adapt its behavior. If no strong trend is apparent, say the state has been "
    "relatively stable or varied and suggest a default supportive approach."
)


def _day_label(value: dt.date) -> str:
    return f"{value:%b} {value.day}"


def build_emotional_context(
    moods: Sequence[MoodLog], messages: Sequence[ChatMessage]
) -> list[str]:
    """Render mood logs and emotion-tagged user turns as prompt lines."""
    lines: list[str] = []
    if moods:
        lines.append("--- Recent Mood Log History (Past 7 Days) ---")
        for mood in moods:
            lines.append(
                f"On {_day_label(mood.date)}: Mood: {mood.mood_label}, "
                f"Intensity: {mood.sentiment_score:.2f}"
            )

    tagged = [
        m
        for m in messages
        if m.dominant_emotion and m.overall_emotional_intensity is not None
    ]
    if tagged:
        lines.append("--- Recent User Message Emotional Context (Past 7 Days) ---")
        for message in tagged:
            snippet = message.content
            if len(snippet) > SNIPPET_LENGTH:
                snippet = f"{snippet[:SNIPPET_LENGTH]}..."
            lines.append(
                f"On {_day_label(message.created_at)} at "
                f"{message.created_at:%H:%M}: Dominant Emotion: "
                f"{message.dominant_emotion}, Intensity: "
                f'{message.overall_emotional_intensity:.2f}. Message: "{snippet}"'
            )
    return lines


def build_trend_prompt(lines: Sequence[str]) -> list[BaseMessage]:
    context = "\n".join(lines)
    return [
        SystemMessage(content=TREND_SYSTEM_PROMPT),
        HumanMessage(
            content=(
                f"Here is the user's recent emotional data:\n\n{context}\n\n"
                "Please provide a concise summary of their emotional trends, "
                "including actionable advice for Quirra."
            )
        ),
    ]


class EmotionalTrendService:
    """Summarizes a week of moods and emotion-tagged messages into memory."""

    def __init__(
        self,
        chat_repo: ChatRepository,
        memory_repo: MemoryRepository,
        wellbeing_repo: WellbeingRepository,
        user_id: str,
        config: LLMConfig,
        llm: BaseChatModel | None = None,
    ) -> None:
        self._chat_repo = chat_repo
        self._memory_repo = memory_repo
        self._wellbeing_repo = wellbeing_repo
        self._user_id = user_id
        self._config = config
        self._llm = llm

    async def summarize_trends(self, chat_session_id: str | None = None) -> str | None:
        """Refresh the user's trend note. Returns None when no note could be written."""
        if not self._config.is_configured:
            logger.warning("Emotional trend summary skipped, no API key configured")
            return None

        since = dt.datetime.now(dt.UTC) - dt.timedelta(days=TREND_WINDOW_DAYS)
        moods = await self._wellbeing_repo.find_moods_since(self._user_id, since.date())
        messages = await self._chat_repo.find_emotional_user_messages(
            self._user_id, since, TREND_MESSAGE_LIMIT
        )
        lines = build_emotional_context(moods, messages)

        if not lines:
            await self._save(STABLE_BASELINE_SUMMARY, chat_session_id)
            logger.info("Default emotional trend summary saved", user_id=self._user_id)
            return STABLE_BASELINE_SUMMARY

        llm = self._llm or build_chat_model(self._config)
        try:
            response = await invoke_with_timeout(
                llm, build_trend_prompt(lines), self._config.timeout_seconds
            )
        except Exception as exc:
            if map_provider_error(exc, "Emotional trend summary") is None:
                raise
            logger.warning(
                "Emotional trend summary failed",
                user_id=self._user_id,
                error=str(exc) or type(exc).__name__,
            )
            return None

        summary = response_text(response)
        if not summary:
            logger.warning("Empty emotional trend summary", user_id=self._user_id)
            return None

        await self._save(summary, chat_session_id)
        logger.info("Emotional trend summary saved", user_id=self._user_id)
        return summary

    async def _save(self, summary: str, chat_session_id: str | None) -> None:
        await self._memory_repo.upsert_keyed(
            user_id=self._user_id,
            key=EMOTIONAL_TREND_KEY,
            role=EMOTIONAL_TREND_ROLE,
            content=summary,
            chat_session_id=chat_session_id,
        )
