"""Library item repository."""

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.library_item import LibraryItem


class LibraryRepository:
    """Encapsulates owner-scoped library item queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(
        self, user_id: str, item_type: str | None = None
    ) -> list[LibraryItem]:
        """List a user's items, newest first, optionally filtered by type."""
        stmt = select(LibraryItem).where(LibraryItem.user_id == user_id)
        if item_type:
            stmt = stmt.where(LibraryItem.type == item_type)
        stmt = stmt.order_by(LibraryItem.created_at.desc(), LibraryItem.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, item_id: str, user_id: str) -> LibraryItem | None:
        result = await self._session.execute(
            select(LibraryItem).where(
                and_(LibraryItem.id == item_id, LibraryItem.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, **fields: str | None) -> LibraryItem:
        item = LibraryItem(user_id=user_id, **fields)
        self._session.add(item)
        await self._session.flush()
        await self._session.refresh(item)
        return item

    async def delete(self, item_id: str, user_id: str) -> bool:
        """Delete one of the user's items. Returns False if none matched."""
        result = await self._session.execute(
            delete(LibraryItem).where(
                and_(LibraryItem.id == item_id, LibraryItem.user_id == user_id)
            )
        )
        return bool(result.rowcount)

    async def delete_by_user(self, user_id: str) -> None:
        await self._session.execute(
            delete(LibraryItem).where(LibraryItem.user_id == user_id)
        )
