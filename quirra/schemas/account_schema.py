"""Profile and account lifecycle schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

LearningStyle = Literal["visual", "auditory", "kinesthetic", "reading"]
CommunicationPreference = Literal["direct", "exploratory", "conceptual"]
FeedbackPreference = Literal["encouraging", "constructive", "challenging"]


class ProfileResponse(BaseModel):
    """Public profile representation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    full_name: str | None = None
    email: str | None = None
    region: str | None = None
    newsletter: bool = False
    preferred_name: str | None = None
    learning_style: str | None = None
    communication_preference: str | None = None
    feedback_preference: str | None = None
    is_pending_deletion: bool = False
    deletion_date: datetime | None = None


class UpdateProfileRequest(BaseModel):
    """Partial profile update; omitted fields are left untouched."""

    full_name: str | None = Field(default=None, max_length=255)
    region: str | None = Field(default=None, max_length=100)
    newsletter: bool | None = None
    preferred_name: str | None = Field(default=None, max_length=100)
    learning_style: LearningStyle | None = None
    communication_preference: CommunicationPreference | None = None
    feedback_preference: FeedbackPreference | None = None


class DeactivationResponse(BaseModel):
    """Scheduled deletion date after deactivation."""

    model_config = ConfigDict(frozen=True)

    deletion_date: datetime


class ChangeEmailRequest(BaseModel):
    """New sign-in email address."""

    model_config = ConfigDict(populate_by_name=True)

    new_email: EmailStr = Field(validation_alias="newEmail")

    @field_validator("new_email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()
