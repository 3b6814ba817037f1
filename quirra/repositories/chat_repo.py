"""Chat repository for session and message database operations."""

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.chat_message import ChatMessage
from quirra.models.chat_session import DEFAULT_SESSION_TITLE, ChatSession


@dataclass(frozen=True)
class SessionWithPreview:
    """Immutable result object for session list queries."""

    id: str
    title: str | None
    last_message_preview: str | None
    created_at: datetime
    updated_at: datetime


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_session_by_id(self, session_id: str) -> ChatSession | None:
        """Find a chat session by its client-generated id."""
        result = await self._session.execute(
            select(ChatSession).where(ChatSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def create_session(
        self,
        session_id: str,
        user_id: str,
        title: str = DEFAULT_SESSION_TITLE,
    ) -> ChatSession:
        """Create a new chat session."""
        session = ChatSession(id=session_id, user_id=user_id, title=title)
        self._session.add(session)
        await self._session.flush()
        await self._session.refresh(session)
        return session

    async def find_messages_by_session_id(self, session_id: str) -> list[ChatMessage]:
        """Retrieve all messages for a session in chronological order."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.chat_session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(result.scalars().all())

    async def find_recent_messages(
        self, session_id: str, limit: int
    ) -> list[ChatMessage]:
        """Retrieve the last ``limit`` messages of a session, oldest first."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.chat_session_id == session_id)
            .order_by(ChatMessage.id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def find_emotional_user_messages(
        self, user_id: str, since: datetime, limit: int
    ) -> list[ChatMessage]:
        """User turns since ``since`` that carry a dominant emotion, oldest first."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(
                and_(
                    ChatMessage.user_id == user_id,
                    ChatMessage.role == "user",
                    ChatMessage.created_at >= since,
                    ChatMessage.dominant_emotion.is_not(None),
                )
            )
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create_message(
        self,
        user_id: str,
        session_id: str,
        role: str,
        content: str,
        sentiment_score: float | None = None,
        dominant_emotion: str | None = None,
        overall_emotional_intensity: float | None = None,
    ) -> ChatMessage:
        """Create a single chat message and bump the session's activity time."""
        message = ChatMessage(
            user_id=user_id,
            chat_session_id=session_id,
            role=role,
            content=content,
            sentiment_score=sentiment_score,
            dominant_emotion=dominant_emotion,
            overall_emotional_intensity=overall_emotional_intensity,
        )
        self._session.add(message)
        await self._session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(updated_at=datetime.now(UTC))
        )
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def find_sessions_by_user(
        self,
        user_id: str,
        limit: int,
        cursor_updated_at: datetime | None = None,
        cursor_id: str | None = None,
    ) -> list[SessionWithPreview]:
        """Fetch user sessions with keyset pagination (updated_at DESC, id DESC).

        Returns ``limit`` rows. The caller should request ``limit + 1`` to
        detect whether a next page exists.
        """
        # Correlated scalar subquery: latest user message content per session
        preview_subq = (
            select(ChatMessage.content)
            .where(
                and_(
                    ChatMessage.chat_session_id == ChatSession.id,
                    ChatMessage.role == "user",
                )
            )
            .order_by(ChatMessage.id.desc())
            .limit(1)
            .correlate(ChatSession)
            .scalar_subquery()
        )

        stmt = select(
            ChatSession.id,
            ChatSession.title,
            preview_subq.label("last_message_preview"),
            ChatSession.created_at,
            ChatSession.updated_at,
        ).where(ChatSession.user_id == user_id)

        if cursor_updated_at is not None and cursor_id is not None:
            stmt = stmt.where(
                or_(
                    ChatSession.updated_at < cursor_updated_at,
                    and_(
                        ChatSession.updated_at == cursor_updated_at,
                        ChatSession.id < cursor_id,
                    ),
                )
            )

        stmt = stmt.order_by(
            ChatSession.updated_at.desc(),
            ChatSession.id.desc(),
        ).limit(limit)

        result = await self._session.execute(stmt)
        return [
            SessionWithPreview(
                id=row.id,
                title=row.title,
                last_message_preview=row.last_message_preview,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in result
        ]

    async def update_session_title(self, session_id: str, title: str) -> None:
        """Update the title of an existing session."""
        await self._session.execute(
            update(ChatSession).where(ChatSession.id == session_id).values(title=title)
        )

    async def delete_messages_by_session(self, session_id: str) -> None:
        """Hard-delete every message of a session."""
        await self._session.execute(
            delete(ChatMessage).where(ChatMessage.chat_session_id == session_id)
        )

    async def delete_all_for_user(self, user_id: str) -> None:
        """Hard-delete all messages, then all sessions, of a user."""
        await self._session.execute(
            delete(ChatMessage).where(ChatMessage.user_id == user_id)
        )
        await self._session.execute(
            delete(ChatSession).where(ChatSession.user_id == user_id)
        )
