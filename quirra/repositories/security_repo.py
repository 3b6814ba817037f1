"""Security settings repository."""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.user_security import UserSecurity


class SecurityRepository:
    """Encapsulates two-factor and recovery settings queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(self, user_id: str) -> UserSecurity | None:
        result = await self._session.execute(
            select(UserSecurity).where(UserSecurity.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, user_id: str, **fields: Any) -> UserSecurity:
        """Update the user's security row, creating an empty one first when missing."""
        security = await self.find_by_user(user_id)
        if security is None:
            security = UserSecurity(user_id=user_id, backup_codes=[], verified=False)
            self._session.add(security)
        for name, value in fields.items():
            setattr(security, name, value)
        await self._session.flush()
        await self._session.refresh(security)
        return security

    async def delete(self, user_id: str) -> None:
        await self._session.execute(
            delete(UserSecurity).where(UserSecurity.user_id == user_id)
        )
