"""Device and login session repositories."""

from datetime import UTC, datetime

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.device import UserDevice, UserSession


class DeviceRepository:
    """Encapsulates remembered device queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(self, user_id: str) -> list[UserDevice]:
        """List a user's devices, most recently used first."""
        result = await self._session.execute(
            select(UserDevice)
            .where(UserDevice.user_id == user_id)
            .order_by(UserDevice.last_used_at.desc(), UserDevice.id.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        user_id: str,
        device_name: str,
        user_agent: str | None,
        ip_address: str | None,
    ) -> UserDevice:
        now = datetime.now(UTC)
        device = UserDevice(
            user_id=user_id,
            device_name=device_name,
            user_agent=user_agent,
            ip_address=ip_address,
            last_used_at=now,
            created_at=now,
        )
        self._session.add(device)
        await self._session.flush()
        await self._session.refresh(device)
        return device

    async def delete(self, device_id: int, user_id: str) -> bool:
        """Delete one of the user's devices. Returns False if none matched."""
        result = await self._session.execute(
            delete(UserDevice).where(
                and_(UserDevice.id == device_id, UserDevice.user_id == user_id)
            )
        )
        return bool(result.rowcount)

    async def delete_by_user(self, user_id: str) -> None:
        await self._session.execute(
            delete(UserDevice).where(UserDevice.user_id == user_id)
        )


class UserSessionRepository:
    """Encapsulates login session queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(self, user_id: str) -> list[UserSession]:
        """List a user's sessions, most recently active first."""
        result = await self._session.execute(
            select(UserSession)
            .where(UserSession.user_id == user_id)
            .order_by(UserSession.last_active_at.desc(), UserSession.id.desc())
        )
        return list(result.scalars().all())

    async def upsert(
        self,
        user_id: str,
        device_name: str,
        user_agent: str | None,
        ip_address: str | None,
    ) -> UserSession:
        """Record activity for (user_id, user_agent), inserting on first sight."""
        result = await self._session.execute(
            select(UserSession).where(
                and_(
                    UserSession.user_id == user_id,
                    UserSession.user_agent == user_agent,
                )
            )
        )
        now = datetime.now(UTC)
        user_session = result.scalar_one_or_none()
        if user_session is None:
            user_session = UserSession(
                user_id=user_id, user_agent=user_agent, created_at=now
            )
            self._session.add(user_session)
        user_session.device_name = device_name
        user_session.ip_address = ip_address
        user_session.last_active_at = now
        await self._session.flush()
        await self._session.refresh(user_session)
        return user_session

    async def delete(self, session_id: int, user_id: str) -> bool:
        """Delete one of the user's sessions. Returns False if none matched."""
        result = await self._session.execute(
            delete(UserSession).where(
                and_(UserSession.id == session_id, UserSession.user_id == user_id)
            )
        )
        return bool(result.rowcount)

    async def delete_by_user(self, user_id: str) -> None:
        await self._session.execute(
            delete(UserSession).where(UserSession.user_id == user_id)
        )
