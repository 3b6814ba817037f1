"""Chat turns: analysis, persistence and the assistant reply."""

from dataclasses import dataclass

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from quirra.core.exceptions import (
    AppException,
    AuthorizationError,
    LLMNotConfiguredError,
    SessionAlreadyExistsError,
)
from quirra.core.llm import (
    build_chat_model,
    invoke_with_timeout,
    map_provider_error,
    response_text,
)
from quirra.core.settings import LLMConfig
from quirra.models.chat_session import DEFAULT_SESSION_TITLE, ChatSession
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.memory_repo import MemoryRepository
from quirra.repositories.profile_repo import ProfileRepository
from quirra.schemas.chat_schema import AskRequest, AskResponse
from quirra.services.analysis_service import analyze_message
from quirra.services.persona_prompt import Personality, build_system_prompt

logger = structlog.get_logger()

HISTORY_TURNS = 10
MEMORY_ENTRIES = 5
RESET_REPLY = "Conversation reset. Let's begin again."
EMPTY_REPLY = "Quirra could not come up with a reply. Please try rephrasing."


@dataclass(frozen=True)
class AskResult:
    """Reply plus whether the session still needs a generated title."""

    response: AskResponse
    session_id: str
    needs_title: bool = False


class ChatService:
    """Runs chat turns for one user."""

    def __init__(
        self,
        chat_repo: ChatRepository,
        memory_repo: MemoryRepository,
        profile_repo: ProfileRepository,
        user_id: str,
        chat_config: LLMConfig,
        analysis_config: LLMConfig,
        chat_llm: BaseChatModel | None = None,
        analysis_llm: BaseChatModel | None = None,
    ) -> None:
        self._chat_repo = chat_repo
        self._memory_repo = memory_repo
        self._profile_repo = profile_repo
        self._user_id = user_id
        self._chat_config = chat_config
        self._analysis_config = analysis_config
        self._chat_llm = chat_llm
        self._analysis_llm = analysis_llm

    async def create_session(self, session_id: str) -> ChatSession:
        """Register a client-generated session id for the user."""
        if await self._chat_repo.find_session_by_id(session_id) is not None:
            raise SessionAlreadyExistsError()
        session = await self._chat_repo.create_session(session_id, self._user_id)
        logger.info("Chat session created", session_id=session_id, user_id=self._user_id)
        return session

    async def _get_or_create_session(self, session_id: str) -> ChatSession:
        session = await self._chat_repo.find_session_by_id(session_id)
        if session is None:
            return await self._chat_repo.create_session(session_id, self._user_id)
        if session.user_id != self._user_id:
            raise AuthorizationError(message="Not authorized to use this conversation")
        return session

    async def reset(self, session_id: str) -> AskResponse:
        """Drop the session's messages and session-scoped memory."""
        session = await self._chat_repo.find_session_by_id(session_id)
        if session is not None and session.user_id != self._user_id:
            raise AuthorizationError(message="Not authorized to reset this conversation")
        await self._chat_repo.delete_messages_by_session(session_id)
        await self._memory_repo.delete_by_session(self._user_id, session_id)
        logger.info("Conversation reset", session_id=session_id, user_id=self._user_id)
        return AskResponse(content=RESET_REPLY)

    async def ask(self, request: AskRequest) -> AskResult:
        """Answer one user turn, or reset the session when asked to."""
        if request.reset:
            response = await self.reset(request.chat_session_id)
            return AskResult(response=response, session_id=request.chat_session_id)

        prompt = (request.prompt or "").strip()
        if not prompt:
            raise AppException(
                message="Please enter a message to chat with Quirra.",
                code="EMPTY_PROMPT",
                status_code=400,
            )
        if not self._chat_config.is_configured:
            raise LLMNotConfiguredError("chat replies")

        analysis = await analyze_message(
            prompt, self._analysis_config, self._analysis_llm
        )

        session = await self._get_or_create_session(request.chat_session_id)
        history = await self._chat_repo.find_recent_messages(session.id, HISTORY_TURNS)
        await self._chat_repo.create_message(
            user_id=self._user_id,
            session_id=session.id,
            role="user",
            content=prompt,
            sentiment_score=analysis.sentiment_score,
            dominant_emotion=analysis.dominant_emotion,
            overall_emotional_intensity=analysis.overall_emotional_intensity,
        )

        profile = await self._profile_repo.find_by_id(self._user_id)
        memory = await self._memory_repo.find_recent_contents(
            self._user_id, MEMORY_ENTRIES
        )
        system_prompt = build_system_prompt(
            Personality.from_profile(profile),
            analysis,
            user_name=request.user_name,
            memory_context="; ".join(memory),
        )

        messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        for turn in history:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            else:
                messages.append(AIMessage(content=turn.content))
        messages.append(HumanMessage(content=prompt))

        llm = self._chat_llm or build_chat_model(self._chat_config)
        try:
            response = await invoke_with_timeout(
                llm, messages, self._chat_config.timeout_seconds
            )
        except Exception as exc:
            mapped = map_provider_error(exc, "Chat")
            if mapped is None:
                raise
            logger.warning(
                "Chat reply failed",
                session_id=session.id,
                code=mapped.code,
                error=str(exc) or type(exc).__name__,
            )
            raise mapped from exc

        reply = response_text(response) or EMPTY_REPLY
        await self._chat_repo.create_message(
            user_id=self._user_id,
            session_id=session.id,
            role="assistant",
            content=reply,
        )
        logger.info(
            "Chat reply stored",
            session_id=session.id,
            intent=analysis.intent,
            dominant_emotion=analysis.dominant_emotion,
        )

        return AskResult(
            response=AskResponse(
                content=reply,
                emotion_score=analysis.sentiment_score,
                analysis=analysis,
            ),
            session_id=session.id,
            needs_title=session.title in (None, DEFAULT_SESSION_TITLE),
        )

    async def delete_all_history(self) -> None:
        """Remove every message, session and memory entry of the user."""
        await self._chat_repo.delete_all_for_user(self._user_id)
        await self._memory_repo.delete_by_user(self._user_id)
        logger.info("Chat history deleted", user_id=self._user_id)
