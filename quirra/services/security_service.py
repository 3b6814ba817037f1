"""Two-factor settings, backup codes and recovery email."""

import secrets
import string
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from quirra.core.exceptions import (
    AppException,
    InvalidRecoveryCodeError,
    InvalidSecurityFieldError,
)
from quirra.core.settings import AppConfig
from quirra.models.user_security import UserSecurity
from quirra.repositories.security_repo import SecurityRepository
from quirra.schemas.security_schema import SecurityActionRequest, TwoFactorMethod
from quirra.services.auth_admin_client import SupabaseAuthClient

logger = structlog.get_logger()

BACKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits
BACKUP_CODE_GROUP = 4

# Columns a client may set directly, with the type each accepts.
UPDATABLE_SECURITY_FIELDS: dict[str, TypeAdapter[Any]] = {
    "two_factor_method": TypeAdapter(TwoFactorMethod | None),
    "verified": TypeAdapter(bool),
    "recovery_email": TypeAdapter(str | None),
}


def generate_backup_code() -> str:
    """One ``XXXX-XXXX`` code of uppercase letters and digits."""
    groups = (
        "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(BACKUP_CODE_GROUP))
        for _ in range(2)
    )
    return "-".join(groups)


class SecurityService:
    """Reads and changes the user's security row."""

    def __init__(
        self,
        security_repo: SecurityRepository,
        auth_client: SupabaseAuthClient,
        app_config: AppConfig,
        user_id: str,
    ) -> None:
        self._security_repo = security_repo
        self._auth_client = auth_client
        self._app_config = app_config
        self._user_id = user_id

    async def get_settings(self) -> UserSecurity:
        """Return the security row, creating an empty one when missing."""
        security = await self._security_repo.find_by_user(self._user_id)
        if security is None:
            security = await self._security_repo.upsert(self._user_id)
        return security

    async def handle_action(self, request: SecurityActionRequest) -> UserSecurity:
        """Dispatch a ``POST /api/security/codes`` action."""
        match request.action:
            case "regenerate":
                return await self.regenerate_backup_codes()
            case "setMethod":
                return await self.set_method(request.method)
            case "saveRecoveryEmail":
                if request.email is None:
                    raise AppException(
                        message="Email is required",
                        code="VALIDATION_ERROR",
                        status_code=400,
                    )
                return await self.save_recovery_email(request.email)
            case _:
                raise AppException(
                    message=f"Invalid action: {request.action}",
                    code="INVALID_ACTION",
                    status_code=400,
                )

    async def regenerate_backup_codes(self) -> UserSecurity:
        codes = [generate_backup_code() for _ in range(self._app_config.backup_code_count)]
        security = await self._security_repo.upsert(
            self._user_id,
            backup_codes=codes,
            backup_codes_generated_at=datetime.now(UTC),
        )
        logger.info("Backup codes regenerated", user_id=self._user_id, count=len(codes))
        return security

    async def set_method(self, method: str | None) -> UserSecurity:
        """Select a two-factor method; None turns two-factor off entirely."""
        if method is None:
            return await self._security_repo.upsert(
                self._user_id,
                two_factor_method=None,
                backup_codes=[],
                backup_codes_generated_at=None,
                verified=False,
            )
        return await self._security_repo.upsert(self._user_id, two_factor_method=method)

    async def save_recovery_email(self, email: str) -> UserSecurity:
        """Store a recovery email; it stays unverified until a code is confirmed."""
        return await self._security_repo.upsert(
            self._user_id,
            recovery_email=email,
            recovery_email_verified_at=None,
        )

    async def update_field(self, field: str, value: Any) -> UserSecurity:
        """Set a single client-writable column."""
        adapter = UPDATABLE_SECURITY_FIELDS.get(field)
        if adapter is None:
            raise InvalidSecurityFieldError(field)
        try:
            validated = adapter.validate_python(value)
        except ValidationError as exc:
            raise AppException(
                message=f"Invalid value for '{field}'",
                code="INVALID_FIELD_VALUE",
                status_code=400,
            ) from exc
        return await self._security_repo.upsert(self._user_id, **{field: validated})

    async def send_recovery_code(self, email: str) -> None:
        """Email a verification code and remember the address as pending."""
        await self._auth_client.send_email_otp(email)
        await self._security_repo.upsert(self._user_id, pending_recovery_email=email)
        logger.info("Recovery code sent", user_id=self._user_id)

    async def verify_recovery_code(self, email: str, code: str) -> UserSecurity:
        """Confirm the pending recovery email with the code the user received."""
        security = await self.get_settings()
        if security.pending_recovery_email != email:
            raise InvalidRecoveryCodeError("No verification pending for this email")
        if not await self._auth_client.verify_email_otp(email, code):
            raise InvalidRecoveryCodeError()
        security = await self._security_repo.upsert(
            self._user_id,
            recovery_email=email,
            pending_recovery_email=None,
            recovery_email_verified_at=datetime.now(UTC),
        )
        logger.info("Recovery email verified", user_id=self._user_id)
        return security
