"""Unit tests for SummaryService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.core.exceptions import (
    EmptyConversationError,
    LLMNotConfiguredError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from quirra.models.memory import MemorySnapshot
from quirra.repositories.memory_repo import MemoryRepository
from quirra.schemas.summary_schema import ConversationTurn
from quirra.services.summary_service import (
    SUMMARY_ROLE,
    SUMMARY_SYSTEM_PROMPT,
    SummaryService,
    build_summary_prompt,
)
from tests.conftest import USER_ID, make_llm_config, make_mock_llm

TURNS = [
    ConversationTurn(role="user", content="I want to learn Rust this month."),
    ConversationTurn(role="assistant", content="Great, start with the book."),
    ConversationTurn(role="system", content="ignored role"),
]


def _failing_llm(exc: Exception) -> MagicMock:
    llm = MagicMock(spec=BaseChatModel)
    llm.ainvoke = AsyncMock(side_effect=exc)
    return llm


async def _snapshot_count(db_session: AsyncSession) -> int:
    result = await db_session.execute(select(func.count()).select_from(MemorySnapshot))
    return result.scalar_one()


def _service(db_session: AsyncSession, llm: BaseChatModel | None, **config: object) -> SummaryService:
    return SummaryService(
        memory_repo=MemoryRepository(db_session),
        user_id=USER_ID,
        config=make_llm_config(**config),  # type: ignore[arg-type]
        llm=llm,
    )


class TestBuildSummaryPrompt:
    def test_roles_mapped(self) -> None:
        messages = build_summary_prompt(TURNS)

        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == SUMMARY_SYSTEM_PROMPT
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)
        assert isinstance(messages[3], AIMessage)
        assert messages[3].content == "ignored role"


class TestSummarize:
    async def test_success_persists_one_snapshot(self, db_session: AsyncSession) -> None:
        llm = make_mock_llm("  User plans to learn Rust this month.  ")
        service = _service(db_session, llm)

        summary = await service.summarize("session-1", TURNS)

        assert summary == "User plans to learn Rust this month."
        rows = (await db_session.execute(select(MemorySnapshot))).scalars().all()
        assert len(rows) == 1
        assert rows[0].role == SUMMARY_ROLE
        assert rows[0].chat_session_id == "session-1"
        assert rows[0].user_id == USER_ID
        assert rows[0].key is None

    async def test_summaries_are_appended(self, db_session: AsyncSession) -> None:
        service = _service(db_session, make_mock_llm("A summary."))

        await service.summarize("session-1", TURNS)
        await service.summarize("session-1", TURNS)

        assert await _snapshot_count(db_session) == 2

    async def test_empty_output_persists_nothing(self, db_session: AsyncSession) -> None:
        service = _service(db_session, make_mock_llm("   "))

        assert await service.summarize("session-1", TURNS) is None
        assert await _snapshot_count(db_session) == 0

    async def test_not_configured(self, db_session: AsyncSession, mock_llm: MagicMock) -> None:
        service = _service(db_session, mock_llm, api_key="")

        with pytest.raises(LLMNotConfiguredError):
            await service.summarize("session-1", TURNS)
        mock_llm.ainvoke.assert_not_called()

    async def test_empty_turns_rejected_before_call(
        self, db_session: AsyncSession, mock_llm: MagicMock
    ) -> None:
        service = _service(db_session, mock_llm)

        with pytest.raises(EmptyConversationError):
            await service.summarize("session-1", [])
        mock_llm.ainvoke.assert_not_called()

    async def test_timeout(self, db_session: AsyncSession) -> None:
        service = _service(db_session, _failing_llm(asyncio.TimeoutError()))

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await service.summarize("session-1", TURNS)

        assert exc_info.value.status_code == 504
        assert "timed out" in exc_info.value.message
        assert await _snapshot_count(db_session) == 0

    async def test_network_error(self, db_session: AsyncSession) -> None:
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        service = _service(
            db_session, _failing_llm(openai.APIConnectionError(request=request))
        )

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await service.summarize("session-1", TURNS)

        assert exc_info.value.status_code == 503

    async def test_provider_status_error(self, db_session: AsyncSession) -> None:
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        response = httpx.Response(429, request=request)
        error = openai.RateLimitError("Rate limit reached", response=response, body=None)
        service = _service(db_session, _failing_llm(error))

        with pytest.raises(ProviderError) as exc_info:
            await service.summarize("session-1", TURNS)

        assert exc_info.value.status_code == 502
        assert "Rate limit reached" in exc_info.value.message

    async def test_unexpected_error_propagates(self, db_session: AsyncSession) -> None:
        service = _service(db_session, _failing_llm(RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            await service.summarize("session-1", TURNS)
