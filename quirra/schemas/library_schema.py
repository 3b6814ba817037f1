"""Library item schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LibraryItemType = Literal["note", "file", "project", "image"]


class CreateLibraryItemRequest(BaseModel):
    """New library entry."""

    title: str = Field(min_length=1, max_length=255)
    type: LibraryItemType
    tag: str | None = Field(default=None, max_length=100)
    description: str | None = None
    content: str | None = None
    file_url: str | None = Field(default=None, max_length=1024)


class LibraryItemResponse(BaseModel):
    """Stored library entry."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    type: str
    tag: str | None = None
    description: str | None = None
    content: str | None = None
    file_url: str | None = None
    created_at: datetime
