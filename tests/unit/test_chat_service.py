"""Unit tests for ChatService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.core.exceptions import (
    AppException,
    AuthorizationError,
    LLMNotConfiguredError,
    ProviderTimeoutError,
    SessionAlreadyExistsError,
)
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.memory_repo import MemoryRepository
from quirra.repositories.profile_repo import ProfileRepository
from quirra.schemas.analysis_schema import DEFAULT_ANALYSIS
from quirra.schemas.chat_schema import AskRequest
from quirra.services.chat_service import EMPTY_REPLY, RESET_REPLY, ChatService
from tests.conftest import (
    OTHER_USER_ID,
    USER_ID,
    make_analysis_llm,
    make_llm_config,
    make_mock_llm,
)

ANALYSIS_PAYLOAD = {
    "mood": "anxious",
    "intent": "question",
    "sentiment_score": -0.5,
    "sentiment_label": "negative",
    "emotions": [{"label": "anxiety", "score": 0.7}],
}


def _service(
    db_session: AsyncSession,
    chat_llm: BaseChatModel | None,
    analysis_llm: BaseChatModel | None = None,
    user_id: str = USER_ID,
    chat_key: str = "test-key",
    analysis_key: str = "test-key",
) -> ChatService:
    return ChatService(
        chat_repo=ChatRepository(db_session),
        memory_repo=MemoryRepository(db_session),
        profile_repo=ProfileRepository(db_session),
        user_id=user_id,
        chat_config=make_llm_config(api_key=chat_key),
        analysis_config=make_llm_config(api_key=analysis_key),
        chat_llm=chat_llm,
        analysis_llm=analysis_llm,
    )


def _ask(prompt: str | None = "How do I stop procrastinating?", **kwargs: object) -> AskRequest:
    return AskRequest(prompt=prompt, chat_session_id="chat-1", **kwargs)  # type: ignore[arg-type]


class TestCreateSession:
    async def test_create(self, db_session: AsyncSession) -> None:
        session = await _service(db_session, None).create_session("chat-1")

        assert session.id == "chat-1"
        assert session.title == "New Chat"

    async def test_duplicate(self, db_session: AsyncSession) -> None:
        service = _service(db_session, None)
        await service.create_session("chat-1")

        with pytest.raises(SessionAlreadyExistsError):
            await service.create_session("chat-1")


class TestAsk:
    async def test_turn_stored_with_analysis(self, db_session: AsyncSession) -> None:
        chat_llm = make_mock_llm("Try the two-minute rule.")
        service = _service(db_session, chat_llm, make_analysis_llm(ANALYSIS_PAYLOAD))

        result = await service.ask(_ask())

        assert result.response.content == "Try the two-minute rule."
        assert result.response.emotion_score == -0.5
        assert result.response.analysis is not None
        assert result.response.analysis.dominant_emotion == "anxiety"
        assert result.needs_title is True

        messages = await ChatRepository(db_session).find_messages_by_session_id("chat-1")
        assert [(m.role, m.content) for m in messages] == [
            ("user", "How do I stop procrastinating?"),
            ("assistant", "Try the two-minute rule."),
        ]
        assert messages[0].dominant_emotion == "anxiety"
        assert messages[0].sentiment_score == -0.5
        assert messages[1].dominant_emotion is None

    async def test_prompt_carries_history_profile_and_memory(
        self, db_session: AsyncSession
    ) -> None:
        await ProfileRepository(db_session).upsert(
            USER_ID, preferred_name="Ada", learning_style="reading"
        )
        await MemoryRepository(db_session).create_snapshot(
            USER_ID, "summary", "User is preparing for exams."
        )
        chat_llm = make_mock_llm("First answer.")
        service = _service(db_session, chat_llm, analysis_key="")
        await service.ask(_ask("Hi there"))

        await service.ask(_ask("And what next?"))

        messages = chat_llm.ainvoke.call_args[0][0]
        assert isinstance(messages[0], SystemMessage)
        assert "The user's name is Ada." in messages[0].content
        assert "User is preparing for exams." in messages[0].content
        assert [type(m) for m in messages[1:]] == [HumanMessage, AIMessage, HumanMessage]
        assert messages[-1].content == "And what next?"

    async def test_analysis_failure_falls_back(self, db_session: AsyncSession) -> None:
        analysis_llm = make_mock_llm("definitely not json")

        result = await _service(db_session, make_mock_llm("ok"), analysis_llm).ask(_ask())

        assert result.response.analysis == DEFAULT_ANALYSIS
        assert result.response.emotion_score == 0.0

    async def test_empty_prompt(self, db_session: AsyncSession, mock_llm: MagicMock) -> None:
        with pytest.raises(AppException) as exc_info:
            await _service(db_session, mock_llm).ask(_ask("   "))

        assert exc_info.value.code == "EMPTY_PROMPT"
        mock_llm.ainvoke.assert_not_called()

    async def test_chat_not_configured(self, db_session: AsyncSession) -> None:
        with pytest.raises(LLMNotConfiguredError):
            await _service(db_session, None, chat_key="").ask(_ask())

    async def test_empty_reply_replaced(self, db_session: AsyncSession) -> None:
        result = await _service(db_session, make_mock_llm(""), analysis_key="").ask(_ask())

        assert result.response.content == EMPTY_REPLY

    async def test_timeout_mapped(self, db_session: AsyncSession) -> None:
        chat_llm = MagicMock(spec=BaseChatModel)
        chat_llm.ainvoke = AsyncMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(ProviderTimeoutError, match="Chat request timed out"):
            await _service(db_session, chat_llm, analysis_key="").ask(_ask())

    async def test_foreign_session_rejected(self, db_session: AsyncSession) -> None:
        await ChatRepository(db_session).create_session("chat-1", OTHER_USER_ID)

        with pytest.raises(AuthorizationError):
            await _service(db_session, make_mock_llm(), analysis_key="").ask(_ask())

    async def test_titled_session_needs_no_title(self, db_session: AsyncSession) -> None:
        await ChatRepository(db_session).create_session("chat-1", USER_ID, title="Exams")

        result = await _service(db_session, make_mock_llm(), analysis_key="").ask(_ask())

        assert result.needs_title is False


class TestResetAndDelete:
    async def test_reset_clears_session(self, db_session: AsyncSession) -> None:
        service = _service(db_session, make_mock_llm("Hello!"), analysis_key="")
        await service.ask(_ask("Hi"))
        await MemoryRepository(db_session).create_snapshot(
            USER_ID, "summary", "Greeting.", chat_session_id="chat-1"
        )
        await MemoryRepository(db_session).create_snapshot(USER_ID, "summary", "Global.")

        result = await service.ask(_ask(None, reset=True))

        assert result.response.content == RESET_REPLY
        assert await ChatRepository(db_session).find_messages_by_session_id("chat-1") == []
        assert await MemoryRepository(db_session).find_recent_contents(USER_ID, 10) == [
            "Global."
        ]

    async def test_delete_all_history(self, db_session: AsyncSession) -> None:
        service = _service(db_session, make_mock_llm("Hello!"), analysis_key="")
        await service.ask(_ask("Hi"))
        await ChatRepository(db_session).create_session("other", OTHER_USER_ID)

        await service.delete_all_history()

        repo = ChatRepository(db_session)
        assert await repo.find_session_by_id("chat-1") is None
        assert await repo.find_session_by_id("other") is not None
