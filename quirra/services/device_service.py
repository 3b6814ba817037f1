"""Remembered devices and login sessions."""

import structlog

from quirra.core.exceptions import (
    AuthProviderError,
    DeviceNotFoundError,
    SessionNotFoundError,
)
from quirra.models.device import UserDevice, UserSession
from quirra.repositories.device_repo import DeviceRepository, UserSessionRepository
from quirra.services.auth_admin_client import SupabaseAuthClient
from quirra.services.token_service import TokenService

logger = structlog.get_logger()

UNKNOWN_DEVICE = "Unknown"
DEVICE_NAME_LENGTH = 80


def device_name_for(user_agent: str | None, name: str | None = None) -> str:
    """Explicit name, else the truncated user agent, else ``Unknown``."""
    if name and name.strip():
        return name.strip()
    if user_agent:
        return user_agent[:DEVICE_NAME_LENGTH]
    return UNKNOWN_DEVICE


class DeviceService:
    """Manages the user's remembered devices."""

    def __init__(self, device_repo: DeviceRepository, user_id: str) -> None:
        self._device_repo = device_repo
        self._user_id = user_id

    async def list_devices(self) -> list[UserDevice]:
        return await self._device_repo.find_by_user(self._user_id)

    async def register_device(
        self,
        name: str | None,
        user_agent: str | None,
        ip_address: str | None,
    ) -> UserDevice:
        device = await self._device_repo.create(
            user_id=self._user_id,
            device_name=device_name_for(user_agent, name),
            user_agent=user_agent,
            ip_address=ip_address,
        )
        logger.info("Device registered", user_id=self._user_id, device_id=device.id)
        return device

    async def remove_device(self, device_id: int) -> None:
        if not await self._device_repo.delete(device_id, self._user_id):
            raise DeviceNotFoundError()
        logger.info("Device removed", user_id=self._user_id, device_id=device_id)


class SessionService:
    """Lists and revokes the user's sign-ins."""

    def __init__(
        self,
        user_session_repo: UserSessionRepository,
        auth_client: SupabaseAuthClient,
        token_service: TokenService,
        user_id: str,
        auth_session_id: str | None = None,
    ) -> None:
        self._user_session_repo = user_session_repo
        self._auth_client = auth_client
        self._token_service = token_service
        self._user_id = user_id
        self._auth_session_id = auth_session_id

    async def list_sessions(self) -> list[UserSession]:
        return await self._user_session_repo.find_by_user(self._user_id)

    async def record_activity(
        self, user_agent: str | None, ip_address: str | None
    ) -> UserSession:
        """Upsert the row for this user agent."""
        return await self._user_session_repo.upsert(
            user_id=self._user_id,
            device_name=device_name_for(user_agent),
            user_agent=user_agent,
            ip_address=ip_address,
        )

    async def revoke_session(self, session_id: int, access_token: str) -> bool:
        """Delete a sign-in row and sign out the user's other sessions.

        Returns False when the provider sign-out failed; the row is removed
        either way.
        """
        if not await self._user_session_repo.delete(session_id, self._user_id):
            raise SessionNotFoundError("Session not found")
        try:
            await self._auth_client.sign_out(access_token, scope="others")
        except AuthProviderError as exc:
            logger.warning(
                "Provider sign-out failed",
                user_id=self._user_id,
                session_id=session_id,
                error=exc.message,
            )
            return False
        logger.info("Session revoked", user_id=self._user_id, session_id=session_id)
        return True

    async def revoke_all(self, access_token: str) -> int:
        """Sign out everywhere and reject every access token issued until now."""
        try:
            await self._auth_client.sign_out(access_token, scope="global")
        except AuthProviderError as exc:
            logger.warning(
                "Provider global sign-out failed",
                user_id=self._user_id,
                error=exc.message,
            )
        revoked_before = await self._token_service.revoke_all(
            self._user_id, [self._auth_session_id]
        )
        await self._user_session_repo.delete_by_user(self._user_id)
        logger.info("All sessions revoked", user_id=self._user_id)
        return revoked_before
