"""Remembered device and login session schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DeviceResponse(BaseModel):
    """Remembered device."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    device_name: str
    user_agent: str | None = None
    ip_address: str | None = None
    last_used_at: datetime
    created_at: datetime


class RegisterDeviceRequest(BaseModel):
    """Device name; falls back to the user agent when omitted."""

    model_config = ConfigDict(populate_by_name=True)

    device_name: str | None = Field(
        default=None, max_length=120, validation_alias="deviceName"
    )


class UserSessionResponse(BaseModel):
    """Active sign-in of the user."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    device_name: str
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime
    last_active_at: datetime


class RevokeSessionRequest(BaseModel):
    """Sign-in to remove."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: int = Field(validation_alias="sessionId")


class RevokeAllResponse(BaseModel):
    """Tokens issued before ``revoked_before`` are rejected, and so are tokens
    of the revoked session issued within that second.
    """

    model_config = ConfigDict(frozen=True)

    revoked_before: int
