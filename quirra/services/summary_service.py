"""Conversation summarization into long-term memory."""

from collections.abc import Sequence

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from quirra.core.exceptions import EmptyConversationError, LLMNotConfiguredError
from quirra.core.llm import (
    build_chat_model,
    invoke_with_timeout,
    map_provider_error,
    response_text,
)
from quirra.core.settings import LLMConfig
from quirra.repositories.memory_repo import MemoryRepository
from quirra.schemas.summary_schema import ConversationTurn

logger = structlog.get_logger()

SUMMARY_ROLE = "summary"

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert summarizer. Extract the key topics, decisions and "
    "important information from the following conversation snippets. Be "
    "concise and capture the essence for long-term memory. Focus on the "
    "user's goals, preferences and any recurring themes. If the conversation "
    'is short, just return the main point. If it is a greeting, return "User '
    'initiated a new chat."'
)


def build_summary_prompt(turns: Sequence[ConversationTurn]) -> list[BaseMessage]:
    """System instruction followed by the turns; non-user roles become assistant turns."""
    messages: list[BaseMessage] = [SystemMessage(content=SUMMARY_SYSTEM_PROMPT)]
    for turn in turns:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        else:
            messages.append(AIMessage(content=turn.content))
    return messages


class SummaryService:
    """Summarizes a batch of turns and appends the result to memory."""

    def __init__(
        self,
        memory_repo: MemoryRepository,
        user_id: str,
        config: LLMConfig,
        llm: BaseChatModel | None = None,
    ) -> None:
        self._memory_repo = memory_repo
        self._user_id = user_id
        self._config = config
        self._llm = llm

    async def summarize(
        self,
        chat_session_id: str,
        turns: Sequence[ConversationTurn],
    ) -> str | None:
        """Return the stored summary, or None when the model produced nothing.

        Raises:
            LLMNotConfiguredError: No API key for the summary model.
            EmptyConversationError: ``turns`` is empty.
            ProviderTimeoutError / ProviderUnavailableError / ProviderError:
                The model call failed.
        """
        if not self._config.is_configured:
            raise LLMNotConfiguredError("summarization")
        if not turns:
            raise EmptyConversationError()

        llm = self._llm or build_chat_model(self._config)
        try:
            response = await invoke_with_timeout(
                llm, build_summary_prompt(turns), self._config.timeout_seconds
            )
        except Exception as exc:
            mapped = map_provider_error(exc, "Summarization")
            if mapped is None:
                raise
            logger.warning(
                "Summarization failed",
                chat_session_id=chat_session_id,
                code=mapped.code,
                error=str(exc) or type(exc).__name__,
            )
            raise mapped from exc

        summary = response_text(response)
        if not summary:
            logger.warning("Empty summary returned", chat_session_id=chat_session_id)
            return None

        await self._memory_repo.create_snapshot(
            user_id=self._user_id,
            role=SUMMARY_ROLE,
            content=summary,
            chat_session_id=chat_session_id,
        )
        logger.info(
            "Summary saved",
            chat_session_id=chat_session_id,
            user_id=self._user_id,
            length=len(summary),
        )
        return summary
