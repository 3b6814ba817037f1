"""Share repository for public conversation snapshots."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.share import Share


class ShareRepository:
    """Encapsulates share link queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        conversation_id: str,
        owner_user_id: str,
        slug: str,
        snapshot: dict[str, Any],
        expire_at: datetime | None = None,
        max_views: int | None = None,
    ) -> Share:
        """Insert a new share link."""
        share = Share(
            conversation_id=conversation_id,
            owner_user_id=owner_user_id,
            slug=slug,
            snapshot=snapshot,
            revoked=False,
            expire_at=expire_at,
            max_views=max_views,
            view_count=0,
        )
        self._session.add(share)
        await self._session.flush()
        return share

    async def find_by_slug(self, slug: str) -> Share | None:
        """Find a share link by its slug."""
        result = await self._session.execute(select(Share).where(Share.slug == slug))
        return result.scalar_one_or_none()

    async def record_view(self, share: Share) -> None:
        """Increment the view counter and stamp the view time."""
        share.view_count = (share.view_count or 0) + 1
        share.last_viewed_at = datetime.now(UTC)
        await self._session.flush()

    async def revoke(self, slug: str, owner_user_id: str) -> bool:
        """Mark an owner's share as revoked. Returns False if none matched."""
        result = await self._session.execute(
            update(Share)
            .where(and_(Share.slug == slug, Share.owner_user_id == owner_user_id))
            .values(revoked=True, revoked_at=datetime.now(UTC))
        )
        return bool(result.rowcount)

    async def delete_by_owner(self, owner_user_id: str) -> None:
        """Delete every share created by a user."""
        await self._session.execute(
            delete(Share).where(Share.owner_user_id == owner_user_id)
        )
