"""Two-factor, backup code and recovery email schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

TwoFactorMethod = Literal["authenticator", "email", "sms"]


class SecuritySettingsResponse(BaseModel):
    """Current security settings of the user."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    two_factor_method: str | None = None
    backup_codes: list[str] = Field(default_factory=list)
    backup_codes_generated_at: datetime | None = None
    verified: bool = False
    recovery_email: str | None = None
    pending_recovery_email: str | None = None
    recovery_email_verified_at: datetime | None = None


class SecurityActionRequest(BaseModel):
    """Action dispatched by ``POST /api/security/codes``.

    ``method`` is read by ``setMethod`` and ``email`` by ``saveRecoveryEmail``.
    """

    action: str = Field(min_length=1)
    method: TwoFactorMethod | None = None
    email: EmailStr | None = None


class SecurityFieldUpdate(BaseModel):
    """Single-column update of the security row."""

    field: str = Field(min_length=1)
    value: Any = None


class RecoverySendRequest(BaseModel):
    """Address to send a recovery verification code to."""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class RecoveryVerifyRequest(BaseModel):
    """Recovery verification code entered by the user."""

    email: EmailStr
    code: str = Field(min_length=4, max_length=12)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()
