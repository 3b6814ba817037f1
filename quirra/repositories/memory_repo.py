"""Memory repository for summary and keyed memory entries."""

from datetime import UTC, datetime

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.memory import MemorySnapshot


class MemoryRepository:
    """Encapsulates long-term memory queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_snapshot(
        self,
        user_id: str,
        role: str,
        content: str,
        chat_session_id: str | None = None,
    ) -> MemorySnapshot:
        """Append a memory entry."""
        snapshot = MemorySnapshot(
            user_id=user_id,
            chat_session_id=chat_session_id,
            role=role,
            content=content,
            timestamp=datetime.now(UTC),
        )
        self._session.add(snapshot)
        await self._session.flush()
        await self._session.refresh(snapshot)
        return snapshot

    async def find_by_key(self, user_id: str, key: str) -> MemorySnapshot | None:
        """Find the keyed memory entry of a user."""
        result = await self._session.execute(
            select(MemorySnapshot).where(
                and_(MemorySnapshot.user_id == user_id, MemorySnapshot.key == key)
            )
        )
        return result.scalar_one_or_none()

    async def upsert_keyed(
        self,
        user_id: str,
        key: str,
        role: str,
        content: str,
        chat_session_id: str | None = None,
    ) -> MemorySnapshot:
        """Insert or overwrite the entry stored under (user_id, key)."""
        snapshot = await self.find_by_key(user_id, key)
        if snapshot is None:
            snapshot = MemorySnapshot(user_id=user_id, key=key)
            self._session.add(snapshot)
        snapshot.role = role
        snapshot.content = content
        snapshot.chat_session_id = chat_session_id
        snapshot.timestamp = datetime.now(UTC)
        await self._session.flush()
        return snapshot

    async def find_recent_contents(self, user_id: str, limit: int) -> list[str]:
        """Contents of the user's newest memory entries, newest first."""
        result = await self._session.execute(
            select(MemorySnapshot.content)
            .where(MemorySnapshot.user_id == user_id)
            .order_by(MemorySnapshot.timestamp.desc(), MemorySnapshot.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def delete_by_session(self, user_id: str, chat_session_id: str) -> None:
        """Delete memory linked to one session."""
        await self._session.execute(
            delete(MemorySnapshot).where(
                and_(
                    MemorySnapshot.user_id == user_id,
                    MemorySnapshot.chat_session_id == chat_session_id,
                )
            )
        )

    async def delete_by_user(self, user_id: str) -> None:
        """Delete all memory of a user."""
        await self._session.execute(
            delete(MemorySnapshot).where(MemorySnapshot.user_id == user_id)
        )
