"""Share link schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quirra.schemas.response_schema import ApiResponse


class CreateShareRequest(BaseModel):
    """Publish a snapshot of one of the caller's conversations."""

    conversation_id: str = Field(min_length=1)
    expire_at: datetime | None = Field(
        default=None, description="Link stops working after this instant"
    )
    max_views: int | None = Field(
        default=None, ge=1, description="Link stops working after this many views"
    )


class ShareLinkResponse(BaseModel):
    """Created share link."""

    model_config = ConfigDict(frozen=True)

    slug: str
    url: str


class ShareLinkApiResponse(ApiResponse[ShareLinkResponse]):
    """Envelope that also exposes ``slug`` and ``url`` at the top level."""

    slug: str
    url: str


class SharedMessage(BaseModel):
    """Message frozen into a share snapshot."""

    model_config = ConfigDict(frozen=True)

    id: int
    role: str
    content: str
    created_at: datetime


class ShareSnapshot(BaseModel):
    """Conversation as it looked when the link was created."""

    model_config = ConfigDict(frozen=True)

    conversation_id: str
    title: str
    shared_at: datetime
    messages: list[SharedMessage]
