"""Profile repository."""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.profile import Profile


class ProfileRepository:
    """Encapsulates profile queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: str) -> Profile | None:
        result = await self._session.execute(
            select(Profile).where(Profile.id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, user_id: str, **fields: Any) -> Profile:
        """Update the profile row, creating it first when missing."""
        profile = await self.find_by_id(user_id)
        if profile is None:
            profile = Profile(id=user_id)
            self._session.add(profile)
        for name, value in fields.items():
            setattr(profile, name, value)
        await self._session.flush()
        await self._session.refresh(profile)
        return profile

    async def delete(self, user_id: str) -> None:
        await self._session.execute(delete(Profile).where(Profile.id == user_id))
