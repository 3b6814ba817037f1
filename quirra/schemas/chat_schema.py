"""Chat request and response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quirra.schemas.analysis_schema import MessageAnalysis


class NewChatRequest(BaseModel):
    """Register a client-generated chat session id."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(min_length=1, max_length=36, validation_alias="sessionId")


class ChatSessionResponse(BaseModel):
    """Newly created chat session."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str | None = None
    created_at: datetime


class AskRequest(BaseModel):
    """A user turn, or a reset of the session."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = Field(default=None, max_length=8000)
    chat_session_id: str = Field(
        min_length=1, max_length=36, validation_alias="chatSessionId"
    )
    user_name: str | None = Field(
        default=None, max_length=100, validation_alias="userName"
    )
    reset: bool = False


class AskResponse(BaseModel):
    """Assistant reply with the analysis of the user's turn."""

    model_config = ConfigDict(frozen=True)

    content: str
    emotion_score: float | None = None
    analysis: MessageAnalysis | None = None
