"""Profile updates and account lifecycle."""

from datetime import UTC, datetime, timedelta

import structlog

from quirra.core.settings import AppConfig
from quirra.models.profile import Profile
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.device_repo import DeviceRepository, UserSessionRepository
from quirra.repositories.library_repo import LibraryRepository
from quirra.repositories.memory_repo import MemoryRepository
from quirra.repositories.profile_repo import ProfileRepository
from quirra.repositories.security_repo import SecurityRepository
from quirra.repositories.share_repo import ShareRepository
from quirra.repositories.wellbeing_repo import WellbeingRepository
from quirra.schemas.account_schema import UpdateProfileRequest
from quirra.services.auth_admin_client import SupabaseAuthClient
from quirra.services.token_service import TokenService

logger = structlog.get_logger()


class AccountService:
    """Owns the profile row and whole-account operations of one user."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        auth_client: SupabaseAuthClient,
        app_config: AppConfig,
        user_id: str,
    ) -> None:
        self._profile_repo = profile_repo
        self._auth_client = auth_client
        self._app_config = app_config
        self._user_id = user_id

    async def get_profile(self, email: str | None = None) -> Profile:
        """Return the profile, creating it on first access."""
        profile = await self._profile_repo.find_by_id(self._user_id)
        if profile is None:
            profile = await self._profile_repo.upsert(self._user_id, email=email)
        return profile

    async def update_profile(self, request: UpdateProfileRequest) -> Profile:
        """Apply the fields present in the request."""
        fields = request.model_dump(exclude_unset=True)
        if fields.get("newsletter", False) is None:
            fields.pop("newsletter")
        profile = await self._profile_repo.upsert(self._user_id, **fields)
        logger.info("Profile updated", user_id=self._user_id, fields=sorted(fields))
        return profile

    async def deactivate(self) -> datetime:
        """Schedule deletion after the grace period and return its date."""
        deletion_date = datetime.now(UTC) + timedelta(
            days=self._app_config.deletion_grace_days
        )
        await self._profile_repo.upsert(
            self._user_id, is_pending_deletion=True, deletion_date=deletion_date
        )
        logger.info(
            "Account deactivated",
            user_id=self._user_id,
            deletion_date=deletion_date.isoformat(),
        )
        return deletion_date

    async def cancel_deletion(self) -> None:
        """Clear a pending deletion; used by both reactivate and cancel."""
        await self._profile_repo.upsert(
            self._user_id, is_pending_deletion=False, deletion_date=None
        )
        logger.info("Account deletion cancelled", user_id=self._user_id)

    async def change_email(self, new_email: str) -> None:
        """Change the sign-in email at the provider and mirror it in the profile."""
        await self._auth_client.update_user_email(self._user_id, new_email)
        await self._profile_repo.upsert(self._user_id, email=new_email)
        logger.info("Email changed", user_id=self._user_id)


class AccountDeletionService:
    """Deletes the auth user and every row the user owns."""

    def __init__(
        self,
        auth_client: SupabaseAuthClient,
        token_service: TokenService,
        chat_repo: ChatRepository,
        memory_repo: MemoryRepository,
        share_repo: ShareRepository,
        profile_repo: ProfileRepository,
        security_repo: SecurityRepository,
        device_repo: DeviceRepository,
        user_session_repo: UserSessionRepository,
        wellbeing_repo: WellbeingRepository,
        library_repo: LibraryRepository,
        user_id: str,
        auth_session_id: str | None = None,
    ) -> None:
        self._auth_client = auth_client
        self._token_service = token_service
        self._chat_repo = chat_repo
        self._memory_repo = memory_repo
        self._share_repo = share_repo
        self._profile_repo = profile_repo
        self._security_repo = security_repo
        self._device_repo = device_repo
        self._user_session_repo = user_session_repo
        self._wellbeing_repo = wellbeing_repo
        self._library_repo = library_repo
        self._user_id = user_id
        self._auth_session_id = auth_session_id

    async def delete_account(self) -> None:
        """Remove all of the user's data, then the user at the provider.

        A provider failure rolls the deletes back with the request.
        """
        await self._chat_repo.delete_all_for_user(self._user_id)
        await self._memory_repo.delete_by_user(self._user_id)
        await self._share_repo.delete_by_owner(self._user_id)
        await self._security_repo.delete(self._user_id)
        await self._device_repo.delete_by_user(self._user_id)
        await self._user_session_repo.delete_by_user(self._user_id)
        await self._wellbeing_repo.delete_by_user(self._user_id)
        await self._library_repo.delete_by_user(self._user_id)
        await self._profile_repo.delete(self._user_id)

        await self._auth_client.delete_user(self._user_id)
        await self._token_service.revoke_all(self._user_id, [self._auth_session_id])
        logger.info("Account deleted", user_id=self._user_id)
